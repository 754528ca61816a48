"""Information strings that describe a compiler, its target and its defaults."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterable, Mapping

from tickstream.compilerid.compilers import (
    CompilerInfo,
    MacroValue,
    _Macros,
    identify_c_compiler,
    identify_cxx_compiler,
)
from tickstream.compilerid.platforms import identify_architecture, identify_platform

C_STD_99 = 199901
C_STD_11 = 201112
C_STD_17 = 201710
C_STD_23 = 202311

CXX_STD_98 = 199711
CXX_STD_11 = 201103
CXX_STD_14 = 201402
CXX_STD_17 = 201703
CXX_STD_20 = 202002
CXX_STD_23 = 202302

_INFO_PATTERN = re.compile(r"INFO:([A-Za-z_]+)\[([^\]]*)\]")
_DEFINE_PATTERN = re.compile(r"^\s*#\s*define\s+([A-Za-z_][A-Za-z0-9_]*)(\(?)(.*)$")

# Compilers whose internal version is a string literal rather than a number.
_INTERNAL_AS_TEXT = frozenset({"IBMClang", "CrayClang", "FujitsuClang"})


def encode_dec(n: int) -> str:
    """Return ``n`` as eight decimal digits, most significant first."""
    if n < 0:
        raise ValueError(f"value must not be negative: {n}")
    return "".join(chr(ord("0") + (n // 10**power) % 10) for power in range(7, -1, -1))


def encode_hex(n: int) -> str:
    """Return the eight low nibbles of ``n``, each added to the character '0'."""
    if n < 0:
        raise ValueError(f"value must not be negative: {n}")
    return "".join(chr(ord("0") + ((n >> shift) & 0xF)) for shift in range(28, -1, -4))


def c_standard_default(macros: Mapping[str, MacroValue]) -> str:
    """Return the default C standard ('90', '99', '11', '17', '23' or '')."""
    m = _Macros(macros)
    if not m.defined("__STDC__") and not m.defined("__clang__"):
        if m.defined("_MSC_VER", "__ibmxl__", "__IBMC__"):
            return "90"
        return ""
    std = m.cond("__STDC_VERSION__")
    if std > C_STD_17:
        return "23"
    if std > C_STD_11:
        return "17"
    if std > C_STD_99:
        return "11"
    if std >= C_STD_99:
        return "99"
    return "90"


def _cxx_std(m: _Macros) -> int:
    cplusplus = m.cond("__cplusplus")
    if m.defined("__INTEL_COMPILER") and m.defined("_MSVC_LANG"):
        lang = m.cond("_MSVC_LANG")
        if lang > CXX_STD_17:
            return lang
        if lang == CXX_STD_17 and m.defined("__cpp_aggregate_paren_init"):
            return CXX_STD_20
        if lang > CXX_STD_14 and cplusplus > CXX_STD_17:
            return CXX_STD_20
        if lang > CXX_STD_14:
            return CXX_STD_17
        if m.defined("__INTEL_CXX11_MODE__") and m.defined("__cpp_aggregate_nsdmi"):
            return CXX_STD_14
        if m.defined("__INTEL_CXX11_MODE__"):
            return CXX_STD_11
        return CXX_STD_98
    if m.defined("_MSC_VER") and m.defined("_MSVC_LANG"):
        lang = m.cond("_MSVC_LANG")
        return lang if lang > cplusplus else cplusplus
    if m.defined("__NVCOMPILER"):
        if cplusplus == CXX_STD_17 and m.defined("__cpp_aggregate_paren_init"):
            return CXX_STD_20
        return cplusplus
    if m.defined("__INTEL_COMPILER", "__PGI"):
        if cplusplus == CXX_STD_11 and m.defined("__cpp_namespace_attributes"):
            return CXX_STD_17
        if cplusplus == CXX_STD_11 and m.defined("__cpp_aggregate_nsdmi"):
            return CXX_STD_14
        return cplusplus
    if m.defined("__IBMCPP__", "__ibmxl__") and m.defined("__linux__"):
        if cplusplus == CXX_STD_11 and m.defined("__cpp_aggregate_nsdmi"):
            return CXX_STD_14
        return cplusplus
    if cplusplus == 1 and m.defined("__GXX_EXPERIMENTAL_CXX0X__"):
        return CXX_STD_11
    return cplusplus


def cxx_standard_default(macros: Mapping[str, MacroValue]) -> str:
    """Return the default C++ standard ('98', '11', ... '26')."""
    std = _cxx_std(_Macros(macros))
    if std > CXX_STD_23:
        return "26"
    if std > CXX_STD_20:
        return "23"
    if std > CXX_STD_17:
        return "20"
    if std > CXX_STD_14:
        return "17"
    if std > CXX_STD_11:
        return "14"
    if std >= CXX_STD_11:
        return "11"
    return "98"


def extensions_default(macros: Mapping[str, MacroValue]) -> str:
    """Return 'ON' when language extensions are on by default, else 'OFF'."""
    m = _Macros(macros)
    known = m.defined("__clang__", "__GNUC__", "__xlC__", "__TI_COMPILER_VERSION__")
    return "ON" if known and not m.defined("__STRICT_ANSI__") else "OFF"


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1]
    return text


def _pad(version: str) -> str:
    return ".".join(part.zfill(8) for part in version.split("."))


def _normalise_language(language: str) -> str:
    key = language.strip().upper()
    if key == "C":
        return "C"
    if key in ("CXX", "C++"):
        return "CXX"
    raise ValueError(f"unknown language: {language!r}")


def info_strings(macros: Mapping[str, MacroValue], language: str = "C") -> list[str]:
    """Return the INFO strings a compiler with ``macros`` embeds, in order.

    ``language`` is 'C' or 'CXX'. Raises ValueError for an unknown language,
    for macros of the wrong language, or for macros that do not make a version.
    """
    lang = _normalise_language(language)
    if lang == "C":
        info: CompilerInfo = identify_c_compiler(macros)
        standard = c_standard_default(macros)
    else:
        info = identify_cxx_compiler(macros)
        standard = cxx_standard_default(macros)
    m = _Macros(macros)

    lines = [f"INFO:compiler[{info.compiler_id}]"]
    if info.simulate_id is not None:
        lines.append(f"INFO:simulate[{info.simulate_id}]")
    if m.defined("__QNXNTO__"):
        lines.append("INFO:qnxnto[]")
    if m.defined("__CRAYXT_COMPUTE_LINUX_TARGET"):
        lines.append("INFO:compiler_wrapper[CrayPrgEnv]")
    if info.version is not None:
        if info.compiler_id == "Fujitsu" and m.defined("__FCC_version__"):
            version = _unquote(info.version)
        else:
            version = _pad(info.version)
        lines.append(f"INFO:compiler_version[{version}]")
    if info.version_internal is not None:
        if info.compiler_id in _INTERNAL_AS_TEXT:
            internal = _unquote(info.version_internal)
        else:
            internal = info.version_internal.zfill(8)
        lines.append(f"INFO:compiler_version_internal[{internal}]")
    if info.simulate_version is not None:
        lines.append(f"INFO:simulate_version[{_pad(info.simulate_version)}]")
    lines.append(f"INFO:platform[{identify_platform(macros)}]")
    lines.append(f"INFO:arch[{identify_architecture(macros)}]")
    lines.append(f"INFO:standard_default[{standard}]")
    lines.append(f"INFO:extensions_default[{extensions_default(macros)}]")
    return lines


def parse_info_strings(text: str) -> dict[str, str]:
    """Collect every ``INFO:key[value]`` found in ``text`` into a dict."""
    return {key: value for key, value in _INFO_PATTERN.findall(text)}


def _parse_defines(lines: Iterable[str]) -> dict[str, str]:
    macros: dict[str, str] = {}
    for line in lines:
        match = _DEFINE_PATTERN.match(line)
        if not match or match.group(2):
            continue
        macros[match.group(1)] = _unquote(match.group(3))
    return macros


def _parse_definition(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not name:
        raise ValueError(f"bad macro definition: {text!r}")
    return name, value if sep else "1"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print the INFO strings for a set of predefined macros."
    )
    parser.add_argument("--language", default="C", help="C or CXX")
    parser.add_argument(
        "--defines", default=None, help="file of '#define NAME VALUE' lines"
    )
    parser.add_argument(
        "-D", dest="definitions", action="append", default=[], metavar="NAME[=VALUE]"
    )
    args = parser.parse_args(argv)

    macros: dict[str, str] = {}
    try:
        if args.defines is not None:
            with open(args.defines, encoding="utf-8") as handle:
                macros.update(_parse_defines(handle))
        for definition in args.definitions:
            name, value = _parse_definition(definition)
            macros[name] = value
        lines = info_strings(macros, args.language)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())