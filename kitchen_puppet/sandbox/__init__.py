"""
Puppet apply sandbox builder.

Prepares a local sandbox for a test-kitchen style host to ship to an
instance and converge with `puppet apply`:

- hiera.yaml and hieradata/base.yaml from the instance's Hiera data
- base.pp including the instance's classes
- modules/ resolved from a Puppetfile, copied from modules/, or packaged
  from the project's own Modulefile
- optional pruning of everything that is not module content
"""

from .base import Instance, Provisioner
from .config import ProvisionerConfig
from .errors import ConfigurationError, ResolverError, ResolverUnavailableError, UserError
from .puppet_apply import PuppetApplyProvisioner

__all__ = [
    "ConfigurationError",
    "Instance",
    "Provisioner",
    "ProvisionerConfig",
    "PuppetApplyProvisioner",
    "ResolverError",
    "ResolverUnavailableError",
    "UserError",
]
