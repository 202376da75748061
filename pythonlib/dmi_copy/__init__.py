from .errors import (
    DmiCopyError,
    ArgumentError,
    FileAccessError,
    DecodeError,
    EncodeError,
)
from .icon import Icon, IconState, load, save
from .merging.merge import MergeOutcome, MergeReport, merge_states
from .atomic import atomic_write, commit

__all__ = [name for name in dir() if not name.startswith("_")]
