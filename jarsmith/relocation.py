"""Package relocation for shaded classes.

Relocating moves bundled classes to a private package so they cannot clash
with another copy the server loads. Three things are rewritten:

1. entry paths in the jar (``io/papermc/lib/PaperLib.class``),
2. UTF-8 constants inside every class file (internal names, descriptors,
   signatures and string literals used for reflection),
3. ``META-INF/services`` provider files, both name and contents.

Only the constant pool changes size. Every other structure in a class file
refers to constants by index, so the bytes after the pool are copied as is.
"""

from __future__ import annotations

import re
import struct

from .errors import RelocationError
from .models import RelocationRule

CLASS_MAGIC = 0xCAFEBABE
SERVICES_PREFIX = "META-INF/services/"

# Constant pool tag → payload size in bytes (Utf8 is variable-length)
_CONSTANT_SIZES = {
    3: 4,  # Integer
    4: 4,  # Float
    5: 8,  # Long
    6: 8,  # Double
    7: 2,  # Class
    8: 2,  # String
    9: 4,  # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}
_UTF8 = 1


class Relocator:
    """Applies a list of relocation rules to paths, text and class files."""

    def __init__(self, rules: list[RelocationRule]) -> None:
        self.rules = rules
        self._patterns: list[tuple[re.Pattern[bytes], bytes]] = []
        for rule in rules:
            for sep in ("/", "."):
                src = rule.pattern.replace(".", sep).encode()
                dst = rule.destination.replace(".", sep).encode()
                # The prefix must start a name or follow the "L" of an object
                # type, which may come straight after a primitive code as in
                # "(ILorg/bstats/...;)V". It ends on a package boundary.
                regex = re.compile(
                    rb"((?<![A-Za-z0-9_$./])L?|(?<=[BCDFIJSZ])L)"
                    + re.escape(src)
                    + rb"(?="
                    + re.escape(sep.encode())
                    + rb"|;|<|$)"
                )
                self._patterns.append((regex, dst))

    def relocate_bytes(self, data: bytes) -> bytes:
        for regex, dst in self._patterns:
            data = regex.sub(lambda m, dst=dst: m.group(1) + dst, data)
        return data

    def relocate_text(self, text: str) -> str:
        return self.relocate_bytes(text.encode("utf-8")).decode("utf-8")

    def relocate_path(self, entry_name: str) -> str:
        """Relocate a jar entry name.

        Class and resource paths use "/" separators; service files are named
        after a dotted interface name.
        """
        if entry_name.startswith(SERVICES_PREFIX):
            return SERVICES_PREFIX + self.relocate_text(entry_name[len(SERVICES_PREFIX) :])
        for rule in self.rules:
            prefix = rule.pattern.replace(".", "/") + "/"
            if entry_name.startswith(prefix):
                return rule.destination.replace(".", "/") + "/" + entry_name[len(prefix) :]
        return entry_name

    def relocate_entry(self, entry_name: str, data: bytes) -> tuple[str, bytes]:
        """Relocate one jar entry, returning its new name and content."""
        new_name = self.relocate_path(entry_name)
        if entry_name.endswith(".class"):
            data = self.relocate_class(data, entry_name)
        elif entry_name.startswith(SERVICES_PREFIX):
            data = self.relocate_bytes(data)
        return new_name, data

    def relocate_class(self, data: bytes, name: str = "<class>") -> bytes:
        """Rewrite the UTF-8 constants of a class file.

        Raises:
            RelocationError: If the data is not a well-formed class file.
        """
        if len(data) < 10 or struct.unpack_from(">I", data, 0)[0] != CLASS_MAGIC:
            raise RelocationError(f"{name} is not a class file")

        (count,) = struct.unpack_from(">H", data, 8)
        out = bytearray(data[:10])
        pos = 10
        index = 1
        try:
            while index < count:
                tag = data[pos]
                if tag == _UTF8:
                    (length,) = struct.unpack_from(">H", data, pos + 1)
                    value = data[pos + 3 : pos + 3 + length]
                    if len(value) != length:
                        raise RelocationError(f"{name}: truncated constant pool")
                    relocated = self.relocate_bytes(value)
                    if len(relocated) > 0xFFFF:
                        raise RelocationError(f"{name}: relocated constant exceeds 65535 bytes")
                    out.append(_UTF8)
                    out += struct.pack(">H", len(relocated))
                    out += relocated
                    pos += 3 + length
                    index += 1
                    continue

                size = _CONSTANT_SIZES.get(tag)
                if size is None:
                    raise RelocationError(f"{name}: unknown constant pool tag {tag}")
                out += data[pos : pos + 1 + size]
                pos += 1 + size
                # Long and Double occupy two pool slots
                index += 2 if tag in (5, 6) else 1
        except (IndexError, struct.error) as exc:
            raise RelocationError(f"{name}: truncated constant pool") from exc

        out += data[pos:]
        return bytes(out)
