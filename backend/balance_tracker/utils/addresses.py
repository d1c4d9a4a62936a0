"""Wallet address validation."""
import re
from typing import Iterable, List, Set

from balance_tracker.utils.errors import InvalidAddressError, InvalidInputError

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_address(address: str) -> bool:
    """True if address is exactly 0x followed by 40 hex characters."""
    return isinstance(address, str) and ADDRESS_PATTERN.fullmatch(address) is not None


def validate_address(address: str) -> str:
    """
    Validate a single address.
    
    Raises:
        InvalidAddressError: If the address is malformed
    """
    if not is_valid_address(address):
        raise InvalidAddressError("Invalid 0x address parameter")
    return address


def normalize_addresses(raw_lines: Iterable[str], max_addresses: int = 0) -> List[str]:
    """
    Turn raw caller input into the ordered list of addresses to process.
    
    Lines are trimmed and blanks discarded. Malformed entries are dropped one
    by one rather than rejecting the whole batch; repeated addresses keep
    their first position.
    
    Args:
        raw_lines: Raw strings, one address per entry
        max_addresses: Upper bound on the result size (0 = unlimited)
        
    Returns:
        Valid addresses in input order
        
    Raises:
        InvalidInputError: If no valid address remains, or too many do
    """
    addresses: List[str] = []
    seen: Set[str] = set()
    dropped = 0
    for line in raw_lines:
        candidate = (line or "").strip()
        if not candidate:
            continue
        if not is_valid_address(candidate):
            dropped += 1
            print(f"[BATCH] WARNING: Dropping invalid address: {candidate!r}")
            continue
        key = candidate.lower()
        if key in seen:
            print(f"[BATCH] Duplicate address skipped: {candidate}")
            continue
        seen.add(key)
        addresses.append(candidate)
    
    if not addresses:
        raise InvalidInputError("Please enter at least one valid address.")
    if max_addresses and len(addresses) > max_addresses:
        raise InvalidInputError(f"Maximum {max_addresses} addresses allowed")
    if dropped:
        print(f"[BATCH] Dropped {dropped} invalid address(es), {len(addresses)} remaining")
    return addresses
