import os
from pathlib import Path
from typing import Union

class LocalFileSystem:
    """Filesystem access used to confirm encoder output."""

    def stat(self, path: Union[str, Path]) -> os.stat_result:
        return os.stat(path)
