"""
Shell commands the host runs on the instance. Pure functions, no I/O.
"""

import posixpath
import shlex
import textwrap
from typing import Optional

from .config import ProvisionerConfig

_INSTALL_SCRIPT = """\
if [ -e "/etc/debian_version" ]; then
  wget -O/tmp/puppet.deb {apt_repo}/puppetlabs-release-$(lsb_release -c -s).deb && \\
    {sudo}dpkg -i /tmp/puppet.deb && \\
    {sudo}apt-get update && \\
    {sudo}apt-get -y install puppet
elif [ -e "/etc/redhat-release" ]; then
  {sudo}rpm -Uvh {yum_repo}/puppetlabs-release-el-$(rpm -E %rhel).noarch.rpm && \\
    {sudo}yum -y install puppet
fi"""


def sudo(command: str, use_sudo: bool = True) -> str:
    """Prefix a command with sudo when configured to."""
    return f"sudo -E {command}" if use_sudo else command


def init_command(remote_path: str, use_sudo: bool = True) -> str:
    """Remove any sandbox left on the instance by a previous converge."""
    return f"{sudo('rm', use_sudo)} -rf {shlex.quote(remote_path)}"


def install_command(config: ProvisionerConfig) -> Optional[str]:
    """
    Install Puppet from the Puppet Labs repositories.

    Returns:
        The command, or None unless require_puppet_package is set
    """
    if not config.require_puppet_package:
        return None

    script = _INSTALL_SCRIPT.format(
        apt_repo=config.puppet_apt_repo,
        yum_repo=config.puppet_yum_repo,
        sudo="sudo " if config.use_sudo else "",
    )
    return "bash -l -c '\n" + textwrap.indent(script, "  ") + "'\n"


def prepare_command() -> str:
    return ""


def run_command_args(config: ProvisionerConfig) -> list[str]:
    """Build the puppet apply invocation as an argument vector."""
    home = config.remote_path
    args = ["sudo", "-E", "puppet"] if config.use_sudo else ["puppet"]
    args.extend(["apply", posixpath.join(home, config.manifest)])

    if config.detailed_exitcodes:
        args.append("--detailed-exitcodes")

    args.extend([
        f"--modulepath={posixpath.join(home, 'modules')}",
        f"--hiera_config={posixpath.join(home, 'hiera.yaml')}",
    ])
    args.extend(config.puppet_apply_args)
    return args


def run_command(config: ProvisionerConfig) -> str:
    return " ".join(shlex.quote(arg) for arg in run_command_args(config))


def run_command_exit_codes(config: ProvisionerConfig) -> list[int]:
    """
    Exit codes of puppet apply that count as success.

    With --detailed-exitcodes puppet exits 2 when it applied changes
    and 0 when there was nothing to do.
    """
    return [0, 2] if config.detailed_exitcodes else [0]
