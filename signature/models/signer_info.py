from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SignerInfo:
    """
    What a recipient supplies when finalizing: names plus PNG images.
    Images may also arrive as data URLs; they are normalized before compositing.
    Only lives for one signing session; names are folded into the recipient.
    """
    full_name: str
    initials: str
    signature_image: Optional[Union[bytes, str]] = None
    initials_image: Optional[Union[bytes, str]] = None

    @classmethod
    def from_names(cls, first_name: str, last_name: str,
                   **images: Optional[Union[bytes, str]]) -> "SignerInfo":
        first = (first_name or "").strip()
        last = (last_name or "").strip()
        initials = f"{first[:1]}{last[:1]}".upper()
        return cls(full_name=f"{first} {last}".strip(), initials=initials, **images)
