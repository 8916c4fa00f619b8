"""Temporary bash script files for shell-mode commands."""

import logging
import os
import tempfile

logger = logging.getLogger(__name__)

_SCRIPT_HEADER = "#!/bin/bash\n\n# do not mask errors in a pipeline\nset -o pipefail\n\n"


def write_bash_script(command: str) -> str:
    """Write ``command`` to a private temporary script and return its path."""
    fd, path = tempfile.mkstemp(prefix="hostdiag-", suffix=".bash")
    with os.fdopen(fd, "w") as handle:
        handle.write(_SCRIPT_HEADER)
        handle.write(command)
        handle.write("\n")
    os.chmod(path, 0o700)
    return path


def remove_script(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        logger.debug("Script %s already removed", path)
