"""Conversion between Unicode text and LaTeX escape sequences.

Encoding is a per-character table lookup. Decoding is best effort: several
spellings of the same command (``\\'e``, ``\\'{e}``, ``{\\'e}``) map to one
character, and unknown commands are left untouched.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, List, Tuple

_ACCENTS = {
    # umlaut / diaeresis
    "ä": '\\"a', "ë": '\\"e', "ï": '\\"i', "ö": '\\"o', "ü": '\\"u', "ÿ": '\\"y',
    "Ä": '\\"A', "Ë": '\\"E', "Ï": '\\"I', "Ö": '\\"O', "Ü": '\\"U',
    # acute
    "á": "\\'a", "é": "\\'e", "í": "\\'i", "ó": "\\'o", "ú": "\\'u", "ý": "\\'y",
    "Á": "\\'A", "É": "\\'E", "Í": "\\'I", "Ó": "\\'O", "Ú": "\\'U", "Ý": "\\'Y",
    "ć": "\\'c", "Ć": "\\'C", "ń": "\\'n", "Ń": "\\'N", "ś": "\\'s", "Ś": "\\'S",
    "ź": "\\'z", "Ź": "\\'Z",
    # grave
    "à": "\\`a", "è": "\\`e", "ì": "\\`i", "ò": "\\`o", "ù": "\\`u",
    "À": "\\`A", "È": "\\`E", "Ì": "\\`I", "Ò": "\\`O", "Ù": "\\`U",
    # circumflex
    "â": "\\^a", "ê": "\\^e", "î": "\\^i", "ô": "\\^o", "û": "\\^u",
    "Â": "\\^A", "Ê": "\\^E", "Î": "\\^I", "Ô": "\\^O", "Û": "\\^U",
    # tilde
    "ã": "\\~a", "ñ": "\\~n", "õ": "\\~o", "Ã": "\\~A", "Ñ": "\\~N", "Õ": "\\~O",
    # dot above
    "ż": "\\.z", "Ż": "\\.Z",
    # cedilla, ogonek, caron, double acute, ring
    "ç": "\\c{c}", "Ç": "\\c{C}", "ş": "\\c{s}", "Ş": "\\c{S}",
    "ą": "\\k{a}", "Ą": "\\k{A}", "ę": "\\k{e}", "Ę": "\\k{E}",
    "č": "\\v{c}", "Č": "\\v{C}", "š": "\\v{s}", "Š": "\\v{S}", "ž": "\\v{z}", "Ž": "\\v{Z}",
    "ř": "\\v{r}", "Ř": "\\v{R}", "ě": "\\v{e}", "Ě": "\\v{E}", "ň": "\\v{n}", "Ň": "\\v{N}",
    "ő": "\\H{o}", "Ő": "\\H{O}", "ű": "\\H{u}", "Ű": "\\H{U}",
    "ů": "\\r{u}", "Ů": "\\r{U}",
}

_LETTERS = {
    "ß": "\\ss{}",
    "å": "\\aa{}", "Å": "\\AA{}",
    "ø": "\\o{}", "Ø": "\\O{}",
    "æ": "\\ae{}", "Æ": "\\AE{}",
    "œ": "\\oe{}", "Œ": "\\OE{}",
    "ł": "\\l{}", "Ł": "\\L{}",
    "¿": "?`", "¡": "!`",
}

_GREEK = {
    "α": "\\alpha", "β": "\\beta", "γ": "\\gamma", "Γ": "\\Gamma", "δ": "\\delta",
    "Δ": "\\Delta", "ε": "\\epsilon", "ζ": "\\zeta", "η": "\\eta", "θ": "\\theta",
    "Θ": "\\Theta", "κ": "\\kappa", "λ": "\\lambda", "Λ": "\\Lambda", "μ": "\\mu",
    "ν": "\\nu", "ξ": "\\xi", "Ξ": "\\Xi", "π": "\\pi", "Π": "\\Pi", "ρ": "\\rho",
    "σ": "\\sigma", "Σ": "\\Sigma", "τ": "\\tau", "υ": "\\upsilon", "φ": "\\phi",
    "Φ": "\\Phi", "χ": "\\chi", "ψ": "\\psi", "Ψ": "\\Psi", "ω": "\\omega",
    "Ω": "\\Omega",
}

_SYMBOLS = {
    "°": "\\textdegree",
    "†": "\\dag",
    "‡": "\\ddag",
    "•": "\\textbullet",
    "…": "\\ldots",
    "§": "\\S",
    "¶": "\\P",
    "©": "\\copyright",
    "®": "\\textregistered",
    "™": "\\texttrademark",
    "£": "\\pounds",
    "€": "\\euro",
    "±": "\\pm",
    "×": "\\times",
    "÷": "\\div",
    "≤": "\\leq",
    "≥": "\\geq",
    "≠": "\\neq",
    "≈": "\\approx",
    "∞": "\\infty",
    "‘": "\\textquoteleft{}",
    "’": "\\textquoteright{}",
    "“": "\\textquotedblleft{}",
    "”": "\\textquotedblright{}",
}

_RESERVED = {
    "$": "\\$",
    "%": "\\%",
    "&": "\\&",
    "#": "\\#",
    "_": "\\_",
    "{": "\\{",
    "}": "\\}",
    "\\": "\\textbackslash{}",
    "~": "\\textasciitilde{}",
    "^": "\\textasciicircum{}",
    '"': "\\textquotedbl{}",
}

UNICODE_TO_LATEX = MappingProxyType({**_ACCENTS, **_LETTERS, **_GREEK, **_SYMBOLS, **_RESERVED})

# Multi-letter commands decoded before the accent scan.
NAMED_COMMANDS = MappingProxyType(
    {
        "\\textbackslash": "\\",
        "\\textasciitilde": "~",
        "\\textasciicircum": "^",
        "\\ldots": "…",
        "\\dots": "…",
        "\\textellipsis": "…",
        "\\textquotedblleft": "“",
        "\\textquotedblright": "”",
        "\\textquoteleft": "‘",
        "\\textquoteright": "’",
        "\\textquotedbl": '"',
        "\\textdegree": "°",
        "\\textbullet": "•",
        "\\textendash": "–",
        "\\textemdash": "—",
    }
)

_STRUCTURAL = {"{", "}", "\\"}
_ACCENT_MARKS = set("\"'`^~.=")


def _spellings(sequence: str) -> List[str]:
    """Regex alternatives for every common spelling of one escape sequence."""
    escaped = re.escape
    if not sequence.startswith("\\"):
        return [escaped(sequence)]
    body = sequence[1:]
    if body and body[0] in _ACCENT_MARKS and len(body) == 2:
        mark, letter = body
        plain = escaped(f"\\{mark}")
        spellings = [
            f"\\{{{plain}\\{{{letter}\\}}\\}}",
            f"\\{{{plain}{letter}\\}}",
            f"{plain}\\{{{letter}\\}}",
            f"{plain}{letter}",
        ]
        if letter == "i":
            # dotless i: \'{\i}
            spellings += [
                f"\\{{{plain}\\{{\\\\i\\}}\\}}",
                f"{plain}\\{{\\\\i\\}}",
                f"\\{{{plain}\\\\i\\}}",
                f"{plain}\\\\i(?![A-Za-z])",
            ]
        return spellings
    if len(body) == 1 and not body.isalpha():
        return [escaped(sequence)]
    if "{" in body and not body.endswith("{}"):
        # \c{c} style: command with a one-letter argument
        command, _, rest = body.partition("{")
        letter = rest.rstrip("}")
        plain = escaped(f"\\{command}")
        return [
            f"\\{{{plain}\\{{{letter}\\}}\\}}",
            f"{plain}\\{{{letter}\\}}",
            f"{plain} {letter}(?![A-Za-z])",
        ]
    command = body[:-2] if body.endswith("{}") else body
    plain = escaped(f"\\{command}")
    return [
        f"\\{{{plain}\\}}",
        f"{plain}\\{{\\}}",
        f"{plain}(?![A-Za-z])",
    ]


def _build_decoder() -> Tuple["re.Pattern[str]", Dict[str, str]]:
    sequences = [(command + "{}", char) for command, char in NAMED_COMMANDS.items()]
    sequences += [(sequence, char) for char, sequence in UNICODE_TO_LATEX.items()]
    # Longest sequences first so \textquotedblleft wins over \textquotedbl.
    # Stable sort: braced spellings of a sequence stay ahead of the bare one.
    sequences.sort(key=lambda item: len(item[0]), reverse=True)
    alternatives: List[Tuple[str, str]] = []
    for sequence, char in sequences:
        alternatives.extend((pattern, char) for pattern in _spellings(sequence))
    lookup: Dict[str, str] = {}
    groups = []
    for index, (pattern, char) in enumerate(alternatives):
        name = f"g{index}"
        lookup[name] = char
        groups.append(f"(?P<{name}>{pattern})")
    return re.compile("|".join(groups)), lookup


_DECODER, _DECODER_LOOKUP = _build_decoder()


def to_latex(text: str, keep_structure: bool = False) -> str:
    """Escape every character that has a LaTeX spelling.

    With ``keep_structure`` braces and backslashes pass through unchanged,
    which keeps existing grouping and commands intact.
    """
    if not text:
        return text
    out: List[str] = []
    for index, ch in enumerate(text):
        if keep_structure and ch in _STRUCTURAL:
            out.append(ch)
            continue
        sequence = UNICODE_TO_LATEX.get(ch)
        if sequence is None:
            out.append(ch)
            continue
        out.append(sequence)
        following = text[index + 1] if index + 1 < len(text) else ""
        if sequence[-1].isalpha() and sequence.startswith("\\") and following.isalpha():
            if not (len(sequence) == 3 and sequence[1] in _ACCENT_MARKS):
                out.append("{}")
    return "".join(out)


def to_unicode(text: str) -> str:
    """Replace known LaTeX commands with the characters they stand for."""
    if not text or ("\\" not in text and "`" not in text):
        return text
    return _DECODER.sub(lambda match: _DECODER_LOOKUP[match.lastgroup], text)


def escape_structure(text: str) -> str:
    """Escape only braces and backslashes."""
    out = []
    for ch in text:
        if ch in _STRUCTURAL:
            out.append(_RESERVED[ch])
        else:
            out.append(ch)
    return "".join(out)


def contains_special_characters(text: str) -> bool:
    return any(ch in UNICODE_TO_LATEX for ch in text or "")


__all__ = [
    "NAMED_COMMANDS",
    "UNICODE_TO_LATEX",
    "contains_special_characters",
    "escape_structure",
    "to_latex",
    "to_unicode",
]
