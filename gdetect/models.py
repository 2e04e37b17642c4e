from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, StrictBool, model_validator

from .config import DEFAULT_PULL_TIME, DEFAULT_WAIT_TIMEOUT


@dataclass(frozen=True)
class SubmitOptions:
    description: str = ""
    tags: Sequence[str] = field(default_factory=tuple)
    bypass_cache: bool = False
    # Overrides the file part name; defaults to the submitted path's base name.
    filename: Optional[str] = None

    def __post_init__(self) -> None:
        # A lone label must not be joined character by character.
        tags = (self.tags,) if isinstance(self.tags, str) else tuple(self.tags)
        object.__setattr__(self, "tags", tags)

    def form_fields(self) -> Dict[str, str]:
        return {
            "description": self.description,
            "tags": ",".join(self.tags),
            "bypass-cache": "true" if self.bypass_cache else "false",
        }


@dataclass(frozen=True)
class WaitForOptions(SubmitOptions):
    pull_time: float = DEFAULT_PULL_TIME
    # None disables the overall deadline.
    timeout: Optional[float] = DEFAULT_WAIT_TIMEOUT


class Result(BaseModel):
    """Analysis outcome as reported by the service.

    Only ``uuid``, ``done``, ``token`` and ``sid`` drive client behaviour; the
    other fields are typed for convenience and any unknown key is kept in
    ``model_extra``.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    uuid: str = ""
    # Only a JSON true ends a wait.
    done: StrictBool = False
    token: str = ""
    sid: str = ""
    sha256: str = ""
    sha1: str = ""
    md5: str = ""
    ssdeep: str = ""
    is_malware: bool = False
    score: int = 0
    timestamp: int = 0
    errors: Dict[str, str] = {}
    error: str = ""
    filetype: str = ""
    size: int = 0
    filenames: List[str] = []
    malwares: List[str] = []
    files: List[Dict[str, Any]] = []
    comment: str = ""
    file_count: int = 0
    duration: int = 0
    threats: Dict[str, Any] = {}

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # The service sends null for fields it has not computed yet.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class SubmitResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    uuid: str = ""
    status: bool = False
