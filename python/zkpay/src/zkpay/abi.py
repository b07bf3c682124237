"""
Shared ABI definitions for smart contracts
"""

from typing import Any, List


def _erc20_view(name: str, output_type: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": output_type}],
    }


# ERC20 metadata getters
ERC20_METADATA_ABI: List[dict[str, Any]] = [
    _erc20_view("name", "string"),
    _erc20_view("symbol", "string"),
    _erc20_view("decimals", "uint8"),
]
