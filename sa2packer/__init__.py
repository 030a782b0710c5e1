from importlib.metadata import version, PackageNotFoundError
try:
    __version__ = version('sa2packer')
except PackageNotFoundError:  # running from a source checkout
    __version__ = None

# import me:
# import sa2packer as sa2

# Types
from .defs import FieldType

# Errors
from . import exc
from .exc import PackerError

# Eager hashes
from .eager_hash import EagerProc, normalize_eager_args, merge as merge_eager_hashes

# ORM interface
from .host import Host, SAHost
from .eager_loading import eager_load

# Packers
from .packer import Packer
from .instance import PackerInstance
