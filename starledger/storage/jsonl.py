import json
from pathlib import Path
from typing import Iterable, List, Union

from starledger.core.block import Block
from starledger.core.canon import compact_json
from starledger.core.errors import DecodeError


def write_chain(blocks: Iterable[Block], path: Union[str, Path]) -> int:
    """Write one block per line. Returns the number of blocks written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for block in blocks:
            f.write(compact_json(block.to_dict()))
            f.write("\n")
            count += 1
    return count


def read_chain(path: Union[str, Path]) -> List[Block]:
    """Load blocks in file order. Blank lines are skipped."""
    blocks = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise DecodeError(f"Line {lineno} is not valid JSON: {e}") from e
            blocks.append(Block.from_dict(record))
    return blocks
