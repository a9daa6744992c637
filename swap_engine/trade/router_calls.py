"""
Calldata for SwapRouter and ERC-20 calls.

Each contract function has a typed parameter struct that validates its
fields and encodes to calldata with eth_abi. Encoding and decoding are pure.
"""

from dataclasses import astuple, dataclass

from eth_abi import decode, encode
from eth_typing import ChecksumAddress
from eth_utils import function_signature_to_4byte_selector, to_checksum_address
from hexbytes import HexBytes

from ..core.errors import ConfigurationError
from ..core.types import checksum

_UINT24_MAX = (1 << 24) - 1
_UINT160_MAX = (1 << 160) - 1
_UINT256_MAX = (1 << 256) - 1

_SINGLE_PARAMS_TYPE = "(address,address,uint24,address,uint256,uint256,uint256,uint160)"

EXACT_INPUT_SINGLE_SIGNATURE = f"exactInputSingle({_SINGLE_PARAMS_TYPE})"
EXACT_OUTPUT_SINGLE_SIGNATURE = f"exactOutputSingle({_SINGLE_PARAMS_TYPE})"
APPROVE_SIGNATURE = "approve(address,uint256)"

EXACT_INPUT_SINGLE_SELECTOR = function_signature_to_4byte_selector(EXACT_INPUT_SINGLE_SIGNATURE)
EXACT_OUTPUT_SINGLE_SELECTOR = function_signature_to_4byte_selector(EXACT_OUTPUT_SINGLE_SIGNATURE)
APPROVE_SELECTOR = function_signature_to_4byte_selector(APPROVE_SIGNATURE)


def _check_uint(value, name: str, upper: int):
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
        raise ConfigurationError(f"{name} out of range: {value!r}")


@dataclass(frozen=True)
class ExactInputSingleParams:
    """ISwapRouter.ExactInputSingleParams."""

    token_in: ChecksumAddress
    token_out: ChecksumAddress
    fee: int
    recipient: ChecksumAddress
    deadline: int
    amount_in: int
    amount_out_minimum: int
    sqrt_price_limit_x96: int = 0

    def __post_init__(self):
        for name in ("token_in", "token_out", "recipient"):
            object.__setattr__(self, name, checksum(getattr(self, name), name))
        if self.token_in == self.token_out:
            raise ConfigurationError("tokenIn and tokenOut must differ")
        _check_uint(self.fee, "fee", _UINT24_MAX)
        _check_uint(self.deadline, "deadline", _UINT256_MAX)
        _check_uint(self.amount_in, "amountIn", _UINT256_MAX)
        _check_uint(self.amount_out_minimum, "amountOutMinimum", _UINT256_MAX)
        _check_uint(self.sqrt_price_limit_x96, "sqrtPriceLimitX96", _UINT160_MAX)

    def encode(self) -> HexBytes:
        return HexBytes(EXACT_INPUT_SINGLE_SELECTOR + encode([_SINGLE_PARAMS_TYPE], [astuple(self)]))


@dataclass(frozen=True)
class ExactOutputSingleParams:
    """ISwapRouter.ExactOutputSingleParams."""

    token_in: ChecksumAddress
    token_out: ChecksumAddress
    fee: int
    recipient: ChecksumAddress
    deadline: int
    amount_out: int
    amount_in_maximum: int
    sqrt_price_limit_x96: int = 0

    def __post_init__(self):
        for name in ("token_in", "token_out", "recipient"):
            object.__setattr__(self, name, checksum(getattr(self, name), name))
        if self.token_in == self.token_out:
            raise ConfigurationError("tokenIn and tokenOut must differ")
        _check_uint(self.fee, "fee", _UINT24_MAX)
        _check_uint(self.deadline, "deadline", _UINT256_MAX)
        _check_uint(self.amount_out, "amountOut", _UINT256_MAX)
        _check_uint(self.amount_in_maximum, "amountInMaximum", _UINT256_MAX)
        _check_uint(self.sqrt_price_limit_x96, "sqrtPriceLimitX96", _UINT160_MAX)

    def encode(self) -> HexBytes:
        return HexBytes(EXACT_OUTPUT_SINGLE_SELECTOR + encode([_SINGLE_PARAMS_TYPE], [astuple(self)]))


@dataclass(frozen=True)
class ApproveCall:
    """ERC-20 approve(spender, amount) on `token`."""

    token: ChecksumAddress
    spender: ChecksumAddress
    amount: int

    def __post_init__(self):
        object.__setattr__(self, "token", checksum(self.token, "token address"))
        object.__setattr__(self, "spender", checksum(self.spender, "spender address"))
        _check_uint(self.amount, "approval amount", _UINT256_MAX)

    def encode(self) -> HexBytes:
        return HexBytes(APPROVE_SELECTOR + encode(["address", "uint256"], [self.spender, self.amount]))


def _decode_single(calldata, selector: bytes, name: str) -> tuple:
    data = bytes(HexBytes(calldata))
    if data[:4] != selector:
        raise ConfigurationError(f"Calldata is not a {name} call (selector 0x{data[:4].hex()})")
    try:
        (params,) = decode([_SINGLE_PARAMS_TYPE], data[4:])
    except Exception as e:
        raise ConfigurationError(f"Malformed {name} calldata: {e}", cause=e)
    token_in, token_out, fee, recipient, *rest = params
    return (
        to_checksum_address(token_in),
        to_checksum_address(token_out),
        fee,
        to_checksum_address(recipient),
        *rest,
    )


def decode_exact_input_single(calldata) -> ExactInputSingleParams:
    """Decode SwapRouter exactInputSingle calldata back into its params."""
    return ExactInputSingleParams(
        *_decode_single(calldata, EXACT_INPUT_SINGLE_SELECTOR, "exactInputSingle")
    )


def decode_exact_output_single(calldata) -> ExactOutputSingleParams:
    """Decode SwapRouter exactOutputSingle calldata back into its params."""
    return ExactOutputSingleParams(
        *_decode_single(calldata, EXACT_OUTPUT_SINGLE_SELECTOR, "exactOutputSingle")
    )
