"""CIDR parsing and per-octet host enumeration for the neighbor-table sweep."""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from gheboot.errors import InvalidSubnetError

Octets = Tuple[int, int, int, int]


def _is_decimal(text: str) -> bool:
    # str.isdigit also accepts superscripts and other non-ASCII digits
    return text.isascii() and text.isdigit()


def cidr_to_netmask(prefix: int) -> Octets:
    """Convert a prefix length into four netmask octets by setting the first N bits."""
    if not 0 <= prefix <= 32:
        raise InvalidSubnetError(f"Prefix length must be between 0 and 32, got {prefix}")
    mask = (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF
    return (mask >> 24 & 0xFF, mask >> 16 & 0xFF, mask >> 8 & 0xFF, mask & 0xFF)


@dataclass(frozen=True)
class SubnetDescriptor:
    """A network address plus prefix length.

    Iteration walks every octet from the network's own value up to
    ``octet | (255 - mask_octet)``, most significant octet outermost. The
    network and broadcast addresses are included and the network address is
    not masked first, so ``10.0.0.5/30`` starts at ``10.0.0.5``.
    """

    network: Octets
    prefix: int

    @classmethod
    def parse(cls, cidr: str) -> "SubnetDescriptor":
        """Parse ``A.B.C.D/N`` into a descriptor.

        Raises:
            InvalidSubnetError: If the address or prefix is malformed
        """
        address, sep, prefix_str = cidr.strip().partition("/")
        if not sep:
            raise InvalidSubnetError(f"Expected CIDR notation (A.B.C.D/N), got {cidr!r}")

        parts = address.split(".")
        if len(parts) != 4 or not all(_is_decimal(p) for p in parts):
            raise InvalidSubnetError(f"Invalid network address {address!r}")
        octets = tuple(int(p) for p in parts)
        if any(o > 255 for o in octets):
            raise InvalidSubnetError(f"Invalid network address {address!r}")

        if not _is_decimal(prefix_str):
            raise InvalidSubnetError(f"Invalid prefix length {prefix_str!r}")
        prefix = int(prefix_str)
        cidr_to_netmask(prefix)

        return cls(network=octets, prefix=prefix)  # type: ignore[arg-type]

    @property
    def netmask(self) -> Octets:
        return cidr_to_netmask(self.prefix)

    def octet_ranges(self) -> List[range]:
        """Inclusive per-octet ranges, as ``range`` objects."""
        return [range(n, (n | (255 - m)) + 1) for n, m in zip(self.network, self.netmask)]

    def __iter__(self) -> Iterator[str]:
        r1, r2, r3, r4 = self.octet_ranges()
        for a in r1:
            for b in r2:
                for c in r3:
                    for d in r4:
                        yield f"{a}.{b}.{c}.{d}"

    def __len__(self) -> int:
        count = 1
        for r in self.octet_ranges():
            count *= len(r)
        return count

    def __str__(self) -> str:
        return ".".join(str(o) for o in self.network) + f"/{self.prefix}"


def list_subnet_ips(cidr: str) -> Iterator[str]:
    """Yield every address in ``cidr`` in network-first order."""
    return iter(SubnetDescriptor.parse(cidr))
