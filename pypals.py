#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pypals.py: byte codecs (hex, base64, xor) and a self-checking challenge runner
"""

import argparse
import sys
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Type, Union

from colorama import init as _init_colorama, Fore, Style

# ---------- Colors ----------
BOLD = Style.BRIGHT; RESET = Style.RESET_ALL
CYAN, GREEN, RED = Fore.CYAN, Fore.GREEN, Fore.RED

def cCYN(s): return f"{BOLD}{CYAN}{s}{RESET}"
def cGRN(s): return f"{GREEN}{s}{RESET}"
def cRED(s): return f"{RED}{s}{RESET}"

def eprint(*a, **k): print(*a, file=sys.stderr, **k)

def disable_color():
    """Turn the color helpers into plain pass-throughs."""
    global BOLD, RESET, CYAN, GREEN, RED
    BOLD = RESET = CYAN = GREEN = RED = ""

# ---------- Errors ----------
class CodecError(ValueError):
    """Base class for every codec validation failure."""

class InvalidLength(CodecError):
    def __init__(self, multiple: int, length: int):
        self.multiple = multiple
        self.length = length
        super().__init__(str(self))

    def __str__(self):
        return f"input length must be divisible by {self.multiple} (got {self.length})"

class InvalidCharacter(CodecError):
    def __init__(self, char: str, index: int):
        self.char = char
        self.index = index
        super().__init__(str(self))

    def __str__(self):
        return f"invalid hex character {self.char!r} at index {self.index}"

class InvalidCharacterPair(CodecError):
    """Both characters of one hex pair are outside the alphabet."""
    def __init__(self, first: str, second: str, index: int):
        self.first = first
        self.second = second
        self.index = index
        super().__init__(str(self))

    def __str__(self):
        return f"invalid hex characters {self.first!r} and {self.second!r} at index {self.index}"

class LengthMismatch(CodecError):
    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(str(self))

    def __str__(self):
        return f"buffers must be the same length (got {self.left} and {self.right})"

# ---------- Alphabets ----------
HEX_DIGITS = "0123456789abcdef"
BASE64_TABLE = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

def _build_nibble_table() -> Tuple[int, ...]:
    # -1 marks a code outside the hex alphabet
    table = [-1] * 256
    for v, ch in enumerate(HEX_DIGITS):
        table[ord(ch)] = v
        table[ord(ch.upper())] = v
    return tuple(table)

NIBBLE_TABLE = _build_nibble_table()

def _nibble(ch: str) -> int:
    code = ord(ch)
    return NIBBLE_TABLE[code] if code < 256 else -1

# ---------- Hex ----------
def hex_decode(text: str) -> bytes:
    """
    Decode a string of hex digit pairs into bytes.

    Digits may be upper or lower case. Pairs are checked left to right and the
    first bad pair raises: InvalidCharacter when one side is bad,
    InvalidCharacterPair when both are.
    """
    if len(text) % 2 != 0:
        raise InvalidLength(2, len(text))
    out = bytearray()
    for i in range(0, len(text), 2):
        c1, c2 = text[i], text[i+1]
        hi, lo = _nibble(c1), _nibble(c2)
        if hi < 0 and lo < 0:
            raise InvalidCharacterPair(c1, c2, i)
        if hi < 0:
            raise InvalidCharacter(c1, i)
        if lo < 0:
            raise InvalidCharacter(c2, i+1)
        out.append((hi << 4) | lo)
    return bytes(out)

def hex_encode(data: bytes) -> str:
    """Encode bytes as lowercase, zero-padded hex with no separators."""
    return bytes(data).hex()

# ---------- Base64 ----------
def base64_encode(data: bytes) -> str:
    """
    Encode bytes as base64 text. Padding is not supported, so the input length
    must be a multiple of 3.
    """
    if len(data) % 3 != 0:
        raise InvalidLength(3, len(data))
    out: List[str] = []
    for i in range(0, len(data), 3):
        b0, b1, b2 = data[i], data[i+1], data[i+2]
        # 24 bits -> four 6-bit values
        out.append(BASE64_TABLE[b0 >> 2])
        out.append(BASE64_TABLE[((b0 & 0x03) << 4) | (b1 >> 4)])
        out.append(BASE64_TABLE[((b1 & 0x0F) << 2) | (b2 >> 6)])
        out.append(BASE64_TABLE[b2 & 0x3F])
    return "".join(out)

# ---------- XOR ----------
def xor_combine(x: bytes, y: bytes) -> bytes:
    if len(x) != len(y):
        raise LengthMismatch(len(x), len(y))
    return bytes(a ^ b for a, b in zip(x, y))

def xor_single_byte(data: bytes, key: int) -> bytes:
    if not 0 <= key <= 0xFF:
        raise ValueError(f"key must be a single byte (got {key})")
    return bytes(b ^ key for b in data)

# ---------- Scoring & single-byte xor ----------
COMMON_LETTERS = "ETAOIN SHRDLU"
_COMMON_CODES = frozenset(ord(c) for c in COMMON_LETTERS + COMMON_LETTERS.lower())

def score_text(data: bytes) -> int:
    """Count bytes that are among the most common English letters (or space)."""
    return sum(1 for b in data if b in _COMMON_CODES)

def break_single_byte_xor(data: bytes) -> Tuple[int, int]:
    """
    Try every key byte and return (key, score) for the best-scoring plaintext.
    The lowest key wins ties.
    """
    key, best = 0, 0
    for k in range(256):
        s = score_text(xor_single_byte(data, k))
        if s > best:
            key, best = k, s
    return key, best

def detect_single_byte_xor(lines: Iterable[str]) -> Tuple[int, int, bytes]:
    """
    Find the one line (hex) that was encrypted with single-byte xor.

    Returns (line index, key, plaintext). Blank lines are skipped but still
    counted for the index.
    """
    winner: Optional[Tuple[int, int, bytes]] = None
    best = -1
    for idx, line in enumerate(lines):
        line = line.strip()
        if not line:
            continue
        raw = hex_decode(line)
        key, s = break_single_byte_xor(raw)
        if s > best:
            best = s
            winner = (idx, key, xor_single_byte(raw, key))
    if winner is None:
        raise ValueError("no hex lines to search")
    return winner

# ---------- Helpers ----------
def read_lines(path: str) -> List[str]:
    with open(path, "r", encoding="ascii") as f:
        return f.read().split("\n")

# ---------- Scenarios ----------
@dataclass
class Scenario:
    name: str
    run: Callable[[], Any]
    want: Union[Any, Type[CodecError]]

@dataclass
class Outcome:
    name: str
    ok: bool
    message: str = "OK"

def _expects_error(want) -> bool:
    return isinstance(want, type) and issubclass(want, CodecError)

def run_scenario(sc: Scenario) -> Outcome:
    """Run one scenario; never raises for codec, value or I/O failures."""
    try:
        got = sc.run()
    except CodecError as e:
        if _expects_error(sc.want) and isinstance(e, sc.want):
            return Outcome(sc.name, True)
        return Outcome(sc.name, False, str(e))
    except (ValueError, OSError) as e:
        return Outcome(sc.name, False, str(e))

    if _expects_error(sc.want):
        return Outcome(sc.name, False, f"got {got!r}, want {sc.want.__name__} error")
    if got != sc.want:
        return Outcome(sc.name, False, f"got {got}, want {sc.want}")
    return Outcome(sc.name, True)

def run_all(scenarios: Sequence[Scenario], debug_on: bool = False) -> List[Outcome]:
    outcomes: List[Outcome] = []
    for sc in scenarios:
        if debug_on:
            eprint(cCYN(f"[RUN] {sc.name}"))
        outcomes.append(run_scenario(sc))
    return outcomes

def print_result(outcome: Outcome):
    if outcome.ok:
        print(f"{outcome.name}: {cGRN('OK')}")
    else:
        print(f"{outcome.name}: {cRED(outcome.message)}")

# ---------- Fixtures ----------
C1_INPUT = "49276d206b696c6c696e6720796f757220627261696e206c696b65206120706f69736f6e6f7573206d757368726f6f6d"
C1_WANT = "SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t"

C2_LEFT = "1c0111001f010100061a024b53535009181c"
C2_RIGHT = "686974207468652062756c6c277320657965"
C2_WANT = "746865206b696420646f6e277420706c6179"

C3_INPUT = "1b37373331363f78151b7f2b783431333d78397828372d363c78373e783a393b3736"
C3_WANT = "Cooking MC's like a pound of bacon"

C4_WANT = "Now that the party is jumping\n"

def challenge1() -> str:
    return base64_encode(hex_decode(C1_INPUT))

def challenge2() -> str:
    return hex_encode(xor_combine(hex_decode(C2_LEFT), hex_decode(C2_RIGHT)))

def challenge3() -> str:
    raw = hex_decode(C3_INPUT)
    key, _ = break_single_byte_xor(raw)
    return xor_single_byte(raw, key).decode("latin1")

def challenge4(path: str) -> str:
    _, _, plain = detect_single_byte_xor(read_lines(path))
    return plain.decode("latin1")

SCENARIOS: List[Scenario] = [
    Scenario("Challenge 1", challenge1, C1_WANT),
    Scenario("Challenge 2", challenge2, C2_WANT),
    Scenario("Challenge 3", challenge3, C3_WANT),
    Scenario("Hex odd length", lambda: hex_decode("1"), InvalidLength),
    Scenario("Hex invalid pair", lambda: hex_decode("gg"), InvalidCharacterPair),
    Scenario("Hex invalid character", lambda: hex_decode("g0"), InvalidCharacter),
    Scenario("Xor length mismatch", lambda: xor_combine(bytes([0x01, 0x02]), bytes([0x01])), LengthMismatch),
]

def build_scenarios(lines_file: Optional[str] = None) -> List[Scenario]:
    scenarios = list(SCENARIOS)
    if lines_file:
        scenarios.insert(3, Scenario("Challenge 4", lambda: challenge4(lines_file), C4_WANT))
    return scenarios

# ---------- Main ----------
def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="pypals: hex/base64/xor codecs checked against known challenges",
        add_help=False
    )
    ap.add_argument("-l","--lines-file", help="File of hex lines, one single-byte-xor encrypted (enables Challenge 4)")
    ap.add_argument("-d","--debug", action="store_true", help="Show each scenario as it runs")
    ap.add_argument("--no-color", action="store_true", help="Plain output without ANSI colors")
    ap.add_argument("-h","--help", action="help", help="Show this help and exit")
    args = ap.parse_args(argv)

    if args.no_color:
        disable_color()
    else:
        _init_colorama(autoreset=True)

    print(cCYN("Pypals!"))
    outcomes = run_all(build_scenarios(args.lines_file), debug_on=args.debug)
    for o in outcomes:
        print_result(o)

    passed = sum(1 for o in outcomes if o.ok)
    summary = f"passed {passed}/{len(outcomes)}"
    print(cGRN(summary) if passed == len(outcomes) else cRED(summary))
    return 0 if passed == len(outcomes) else 1

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted."); sys.exit(130)
