from enum import Enum


class Network(str, Enum):
    """Supported EVM networks. Values match the Token API `network` parameter."""

    MAINNET = "mainnet"
    BSC = "bsc"
    POLYGON = "polygon"
    OPTIMISM = "optimism"
    BASE = "base"
    ARBITRUM_ONE = "arbitrum-one"
    AVALANCHE = "avalanche"
    UNICHAIN = "unichain"


def parse_networks(value: str | list[str] | None) -> list[Network]:
    """Parse a comma-separated string (or list of them) into networks.

    Empty input selects every supported network.
    """
    if not value:
        return list(Network)
    joined = ",".join(value) if isinstance(value, list) else value
    picked = [part.strip() for part in joined.split(",") if part.strip()]
    known = {n.value for n in Network}
    invalid = [p for p in picked if p not in known]
    if invalid:
        raise ValueError(f"Invalid network(s): {', '.join(invalid)}")
    if not picked:
        return list(Network)
    # dedup, keep request order
    return [Network(p) for p in dict.fromkeys(picked)]
