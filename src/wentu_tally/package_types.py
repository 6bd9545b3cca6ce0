import pathlib

from typing import (Callable, Dict, Hashable, List, Sequence, Union)

# used in parser function
Path = Union[str, pathlib.Path]

# opaque date option identifier, uuid or string
Candidate = Hashable

# one participant's ranked date options, most preferred first
Ballot = Sequence[Candidate]

# ranking rows or date option rows in list-of-dict form
Records = List[Dict]

# returned from parser module, get_parser_dict
ParserDict = Dict[str, Callable[..., Dict[str, List]]]
