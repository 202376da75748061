import errno
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path

from .errors import FileAccessError


def _make_temp(target: Path, suffix: str):
    """
    Open a temp file next to ``target``, or in the system temp dir if that fails.

    Returns ``(file, beside_target)``.
    """
    try:
        f = tempfile.NamedTemporaryFile(
            "wb", dir=target.parent, prefix=".tmp-", suffix=suffix, delete=False
        )
        return f, True
    except OSError:
        return tempfile.NamedTemporaryFile("wb", suffix=suffix, delete=False), False


def _same_device(a: Path, b: Path) -> bool:
    try:
        return os.stat(a).st_dev == os.stat(b).st_dev
    except OSError:
        return False


def _publish(tmp: Path, target: Path, rename=True) -> None:
    if rename and _same_device(tmp, target.parent):
        try:
            os.replace(tmp, target)
            return
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
    # other filesystem or unwritable directory: copy over the target,
    # the caller removes the temp file
    shutil.copyfile(tmp, target)


@contextmanager
def atomic_write(path, suffix=".dmi"):
    """
    Yield a binary file that replaces ``path`` only once the block succeeds.

    The data goes to a temporary file, preferably in the same directory as
    ``path`` so that publishing is a single rename. If the block raises,
    or publishing fails, the temporary file is deleted and ``path`` keeps
    its old contents.
    """
    # write through symlinks instead of replacing the link
    target = Path(path).resolve()
    try:
        f, beside_target = _make_temp(target, suffix)
    except OSError as e:
        raise FileAccessError(
            f"failed to create temporary output file for {target}: {e}", target
        ) from e

    tmp = Path(f.name)
    try:
        with f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        try:
            if target.exists():
                shutil.copymode(target, tmp)
            _publish(tmp, target, rename=beside_target)
        except OSError as e:
            raise FileAccessError(
                f"failed to move temporary file {tmp} to {target}: {e}", target
            ) from e
    finally:
        if tmp.exists():
            tmp.unlink()


def commit(icon, path) -> None:
    """Serialize ``icon`` onto ``path`` through :func:`atomic_write`."""
    with atomic_write(path) as f:
        icon.save(f)
