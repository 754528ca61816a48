"""Compiler identification from the set of predefined preprocessor macros."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Union

MacroValue = Union[int, str, bool]

_INT_LITERAL = re.compile(r"(0[xX][0-9a-fA-F]+|[0-9]+)[uUlL]*")

_IAR_SHORT_VERSION_TARGETS = (
    "__ICCAVR__",
    "__ICCRX__",
    "__ICCRH850__",
    "__ICCRL78__",
    "__ICC430__",
    "__ICCRISCV__",
    "__ICCV850__",
    "__ICC8051__",
    "__ICCSTM8__",
)


@dataclass(frozen=True)
class CompilerInfo:
    """What the macros reveal about a compiler.

    ``version`` and ``simulate_version`` are dotted strings with the leading
    zeros of each component removed; they are None when not determined.
    """

    compiler_id: str
    version: str | None = None
    version_internal: str | None = None
    simulate_id: str | None = None
    simulate_version: str | None = None


def _to_int(name: str, value: MacroValue) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = _INT_LITERAL.fullmatch(value.strip())
        if match:
            body = match.group(1)
            try:
                if body[:2].lower() == "0x":
                    return int(body, 16)
                if len(body) > 1 and body.startswith("0"):
                    return int(body, 8)
                return int(body)
            except ValueError:
                pass
    raise ValueError(f"macro {name} has no integer value: {value!r}")


class _Macros:
    """Read access to a macro table with preprocessor semantics."""

    def __init__(self, macros: Mapping[str, MacroValue]) -> None:
        self._table = dict(macros)

    def defined(self, *names: str) -> bool:
        return any(name in self._table for name in names)

    def cond(self, name: str) -> int:
        """Value as seen in a conditional: an undefined macro counts as 0."""
        if name not in self._table:
            return 0
        return _to_int(name, self._table[name])

    def value(self, name: str) -> int:
        """Value needed to build a version: the macro must be defined."""
        if name not in self._table:
            raise ValueError(f"macro {name} is not defined")
        return _to_int(name, self._table[name])

    def text(self, name: str) -> str:
        if name not in self._table:
            raise ValueError(f"macro {name} is not defined")
        return str(self._table[name])


def _dec(n: int) -> str:
    """Decimal component as the eight-digit encoding yields it, zeros stripped."""
    if n < 0:
        raise ValueError(f"version component must not be negative: {n}")
    return str(n % 100_000_000)


def _hex(n: int) -> str:
    """Nibble-per-digit component, as the eight-digit hex encoding yields it."""
    if n < 0:
        raise ValueError(f"version component must not be negative: {n}")
    digits = "".join(chr(ord("0") + ((n >> shift) & 0xF)) for shift in range(28, -1, -4))
    return digits.lstrip("0") or "0"


def _join(*parts: str | None) -> str | None:
    """Join components up to the first missing one."""
    taken: list[str] = []
    for part in parts:
        if part is None:
            break
        taken.append(part)
    return ".".join(taken) if taken else None


@dataclass
class _Found:
    compiler_id: str = ""
    major: str | None = None
    minor: str | None = None
    patch: str | None = None
    tweak: str | None = None
    literal: str | None = None
    internal: str | None = None
    sim_id: str | None = None
    sim_major: str | None = None
    sim_minor: str | None = None
    sim_patch: str | None = None

    def result(self) -> CompilerInfo:
        version = self.literal if self.literal is not None else _join(
            self.major, self.minor, self.patch, self.tweak
        )
        return CompilerInfo(
            compiler_id=self.compiler_id,
            version=version,
            version_internal=self.internal,
            simulate_id=self.sim_id,
            simulate_version=_join(self.sim_major, self.sim_minor, self.sim_patch),
        )


def _intel_simulate(m: _Macros, f: _Found) -> None:
    if m.defined("_MSC_VER"):
        f.sim_id = "MSVC"
    if m.defined("__GNUC__"):
        f.sim_id = "GNU"


def _intel_simulate_version(m: _Macros, f: _Found) -> None:
    if m.defined("_MSC_VER"):
        f.sim_major = _dec(m.value("_MSC_VER") // 100)
        f.sim_minor = _dec(m.value("_MSC_VER") % 100)
    if m.defined("__GNUC__"):
        f.sim_major = _dec(m.value("__GNUC__"))
    elif m.defined("__GNUG__"):
        f.sim_major = _dec(m.value("__GNUG__"))
    if m.defined("__GNUC_MINOR__"):
        f.sim_minor = _dec(m.value("__GNUC_MINOR__"))
    if m.defined("__GNUC_PATCHLEVEL__"):
        f.sim_patch = _dec(m.value("__GNUC_PATCHLEVEL__"))


def _msvc_simulate(m: _Macros, f: _Found) -> None:
    if m.defined("_MSC_VER"):
        f.sim_id = "MSVC"
        f.sim_major = _dec(m.value("_MSC_VER") // 100)
        f.sim_minor = _dec(m.value("_MSC_VER") % 100)


def _clang_version(m: _Macros, f: _Found) -> None:
    f.major = _dec(m.value("__clang_major__"))
    f.minor = _dec(m.value("__clang_minor__"))
    f.patch = _dec(m.value("__clang_patchlevel__"))


def _vrp(f: _Found, v: int) -> None:
    f.major = _dec(v // 100)
    f.minor = _dec(v // 10 % 10)
    f.patch = _dec(v % 10)


def _identify(m: _Macros, cxx: bool) -> CompilerInfo:
    f = _Found()
    sunpro = "__SUNPRO_CC" if cxx else "__SUNPRO_C"
    hp = "__HP_aCC" if cxx else "__HP_cc"
    dec_macro, dec_ver = ("__DECCXX", "__DECCXX_VER") if cxx else ("__DECC", "__DECC_VER")
    ibm = "__IBMCPP__" if cxx else "__IBMC__"

    if m.defined("__INTEL_COMPILER", "__ICC"):
        f.compiler_id = "Intel"
        _intel_simulate(m, f)
        ic = m.cond("__INTEL_COMPILER")
        if ic < 2021 or ic in (202110, 202111):
            v = m.value("__INTEL_COMPILER")
            f.major = _dec(v // 100)
            f.minor = _dec(v // 10 % 10)
            if m.defined("__INTEL_COMPILER_UPDATE"):
                f.patch = _dec(m.value("__INTEL_COMPILER_UPDATE"))
            else:
                f.patch = _dec(v % 10)
        else:
            f.major = _dec(m.value("__INTEL_COMPILER"))
            f.minor = _dec(m.value("__INTEL_COMPILER_UPDATE"))
            f.patch = _dec(0)
        if m.defined("__INTEL_COMPILER_BUILD_DATE"):
            f.tweak = _dec(m.value("__INTEL_COMPILER_BUILD_DATE"))
        _intel_simulate_version(m, f)

    elif (m.defined("__clang__") and m.defined("__INTEL_CLANG_COMPILER")) or m.defined(
        "__INTEL_LLVM_COMPILER"
    ):
        f.compiler_id = "IntelLLVM"
        _intel_simulate(m, f)
        if m.cond("__INTEL_LLVM_COMPILER") < 1000000:
            _vrp(f, m.value("__INTEL_LLVM_COMPILER"))
        else:
            v = m.value("__INTEL_LLVM_COMPILER")
            f.major = _dec(v // 10000)
            f.minor = _dec(v // 100 % 100)
            f.patch = _dec(v % 100)
        _intel_simulate_version(m, f)

    elif m.defined("__PATHCC__"):
        f.compiler_id = "PathScale"
        f.major = _dec(m.value("__PATHCC__"))
        f.minor = _dec(m.value("__PATHCC_MINOR__"))
        if m.defined("__PATHCC_PATCHLEVEL__"):
            f.patch = _dec(m.value("__PATHCC_PATCHLEVEL__"))

    elif m.defined("__BORLANDC__") and m.defined("__CODEGEARC_VERSION__"):
        f.compiler_id = "Embarcadero"
        v = m.value("__CODEGEARC_VERSION__")
        f.major = _hex((v >> 24) & 0x00FF)
        f.minor = _hex((v >> 16) & 0x00FF)
        f.patch = _dec(v & 0xFFFF)

    elif m.defined("__BORLANDC__"):
        f.compiler_id = "Borland"
        v = m.value("__BORLANDC__")
        f.major = _hex(v >> 8)
        f.minor = _hex(v & 0xFF)

    elif m.defined("__WATCOMC__") and m.cond("__WATCOMC__") < 1200:
        f.compiler_id = "Watcom"
        v = m.value("__WATCOMC__")
        f.major = _dec(v // 100)
        f.minor = _dec((v // 10) % 10)
        if v % 10 > 0:
            f.patch = _dec(v % 10)

    elif m.defined("__WATCOMC__"):
        f.compiler_id = "OpenWatcom"
        v = m.value("__WATCOMC__")
        f.major = _dec((v - 1100) // 100)
        f.minor = _dec((v // 10) % 10)
        if v % 10 > 0:
            f.patch = _dec(v % 10)

    elif m.defined(sunpro):
        f.compiler_id = "SunPro"
        v = m.value(sunpro)
        if v >= 0x5100:
            f.major = _hex(v >> 12)
            f.minor = _hex((v >> 4) & 0xFF)
        else:
            f.major = _hex(v >> 8)
            f.minor = _hex((v >> 4) & 0xF)
        f.patch = _hex(v & 0xF)

    elif m.defined(hp):
        f.compiler_id = "HP"
        v = m.value(hp)
        f.major = _dec(v // 10000)
        f.minor = _dec(v // 100 % 100)
        f.patch = _dec(v % 100)

    elif m.defined(dec_macro):
        f.compiler_id = "Compaq"
        v = m.value(dec_ver)
        f.major = _dec(v // 10000000)
        f.minor = _dec(v // 100000 % 100)
        f.patch = _dec(v % 10000)

    elif m.defined(ibm) and m.defined("__COMPILER_VER__"):
        f.compiler_id = "zOS"
        _vrp(f, m.value(ibm))

    elif m.defined("__open_xl__") and m.defined("__clang__"):
        f.compiler_id = "IBMClang"
        f.major = _dec(m.value("__open_xl_version__"))
        f.minor = _dec(m.value("__open_xl_release__"))
        f.patch = _dec(m.value("__open_xl_modification__"))
        f.tweak = _dec(m.value("__open_xl_ptf_fix_level__"))
        f.internal = m.text("__clang_version__")

    elif m.defined("__ibmxl__") and m.defined("__clang__"):
        f.compiler_id = "XLClang"
        f.major = _dec(m.value("__ibmxl_version__"))
        f.minor = _dec(m.value("__ibmxl_release__"))
        f.patch = _dec(m.value("__ibmxl_modification__"))
        f.tweak = _dec(m.value("__ibmxl_ptf_fix_level__"))

    elif m.defined(ibm) and not m.defined("__COMPILER_VER__") and m.cond(ibm) >= 800:
        f.compiler_id = "XL"
        _vrp(f, m.value(ibm))

    elif m.defined(ibm) and not m.defined("__COMPILER_VER__") and m.cond(ibm) < 800:
        f.compiler_id = "VisualAge"
        _vrp(f, m.value(ibm))

    elif m.defined("__NVCOMPILER"):
        f.compiler_id = "NVHPC"
        f.major = _dec(m.value("__NVCOMPILER_MAJOR__"))
        f.minor = _dec(m.value("__NVCOMPILER_MINOR__"))
        if m.defined("__NVCOMPILER_PATCHLEVEL__"):
            f.patch = _dec(m.value("__NVCOMPILER_PATCHLEVEL__"))

    elif m.defined("__PGI"):
        f.compiler_id = "PGI"
        f.major = _dec(m.value("__PGIC__"))
        f.minor = _dec(m.value("__PGIC_MINOR__"))
        if m.defined("__PGIC_PATCHLEVEL__"):
            f.patch = _dec(m.value("__PGIC_PATCHLEVEL__"))

    elif m.defined("__clang__") and m.defined("__cray__"):
        f.compiler_id = "CrayClang"
        f.major = _dec(m.value("__cray_major__"))
        f.minor = _dec(m.value("__cray_minor__"))
        f.patch = _dec(m.value("__cray_patchlevel__"))
        f.internal = m.text("__clang_version__")

    elif m.defined("_CRAYC"):
        f.compiler_id = "Cray"
        f.major = _dec(m.value("_RELEASE_MAJOR"))
        f.minor = _dec(m.value("_RELEASE_MINOR"))

    elif m.defined("__TI_COMPILER_VERSION__"):
        f.compiler_id = "TI"
        v = m.value("__TI_COMPILER_VERSION__")
        f.major = _dec(v // 1000000)
        f.minor = _dec(v // 1000 % 1000)
        f.patch = _dec(v % 1000)

    elif m.defined("__CLANG_FUJITSU"):
        f.compiler_id = "FujitsuClang"
        f.major = _dec(m.value("__FCC_major__"))
        f.minor = _dec(m.value("__FCC_minor__"))
        f.patch = _dec(m.value("__FCC_patchlevel__"))
        f.internal = m.text("__clang_version__")

    elif m.defined("__FUJITSU"):
        f.compiler_id = "Fujitsu"
        if m.defined("__FCC_version__"):
            f.literal = m.text("__FCC_version__")
        elif m.defined("__FCC_major__"):
            f.major = _dec(m.value("__FCC_major__"))
            f.minor = _dec(m.value("__FCC_minor__"))
            f.patch = _dec(m.value("__FCC_patchlevel__"))
        if m.defined("__fcc_version"):
            f.internal = _dec(m.value("__fcc_version"))
        elif m.defined("__FCC_VERSION"):
            f.internal = _dec(m.value("__FCC_VERSION"))

    elif m.defined("__ghs__"):
        f.compiler_id = "GHS"
        if m.defined("__GHS_VERSION_NUMBER"):
            _vrp(f, m.value("__GHS_VERSION_NUMBER"))

    elif m.defined("__TASKING__"):
        f.compiler_id = "Tasking"
        v = m.value("__VERSION__")
        f.major = _dec(v // 1000)
        f.minor = _dec(v % 100)
        f.internal = _dec(v)

    elif m.defined("__ORANGEC__"):
        f.compiler_id = "OrangeC"
        f.major = _dec(m.value("__ORANGEC_MAJOR__"))
        f.minor = _dec(m.value("__ORANGEC_MINOR__"))
        f.patch = _dec(m.value("__ORANGEC_PATCHLEVEL__"))

    elif not cxx and m.defined("__TINYC__"):
        f.compiler_id = "TinyCC"

    elif not cxx and m.defined("__BCC__"):
        f.compiler_id = "Bruce"

    elif m.defined("__SCO_VERSION__"):
        f.compiler_id = "SCO"

    elif m.defined("__ARMCC_VERSION") and not m.defined("__clang__"):
        f.compiler_id = "ARMCC"
        v = m.value("__ARMCC_VERSION")
        if v >= 1000000:
            f.major = _dec(v // 1000000)
            f.minor = _dec(v // 10000 % 100)
        else:
            f.major = _dec(v // 100000)
            f.minor = _dec(v // 10000 % 10)
        f.patch = _dec(v % 10000)

    elif m.defined("__clang__") and m.defined("__apple_build_version__"):
        f.compiler_id = "AppleClang"
        _clang_version(m, f)
        _msvc_simulate(m, f)
        f.tweak = _dec(m.value("__apple_build_version__"))

    elif m.defined("__clang__") and m.defined("__ARMCOMPILER_VERSION"):
        f.compiler_id = "ARMClang"
        v = m.value("__ARMCOMPILER_VERSION")
        f.major = _dec(v // 1000000)
        f.minor = _dec(v // 10000 % 100)
        f.patch = _dec(v // 100 % 100)
        f.internal = _dec(v)

    elif m.defined("__clang__") and m.defined("__ti__"):
        f.compiler_id = "TIClang"
        f.major = _dec(m.value("__ti_major__"))
        f.minor = _dec(m.value("__ti_minor__"))
        f.patch = _dec(m.value("__ti_patchlevel__"))
        f.internal = _dec(m.value("__ti_version__"))

    elif m.defined("__clang__"):
        f.compiler_id = "Clang"
        _clang_version(m, f)
        _msvc_simulate(m, f)

    elif m.defined("__LCC__") and m.defined("__GNUC__", "__GNUG__", "__MCST__"):
        f.compiler_id = "LCC"
        v = m.value("__LCC__")
        f.major = _dec(v // 100)
        f.minor = _dec(v % 100)
        if m.defined("__LCC_MINOR__"):
            f.patch = _dec(m.value("__LCC_MINOR__"))
        if m.defined("__GNUC__") and m.defined("__GNUC_MINOR__"):
            f.sim_id = "GNU"
            f.sim_major = _dec(m.value("__GNUC__"))
            f.sim_minor = _dec(m.value("__GNUC_MINOR__"))
            if m.defined("__GNUC_PATCHLEVEL__"):
                f.sim_patch = _dec(m.value("__GNUC_PATCHLEVEL__"))

    elif m.defined("__GNUC__") or (cxx and m.defined("__GNUG__")):
        f.compiler_id = "GNU"
        if m.defined("__GNUC__"):
            f.major = _dec(m.value("__GNUC__"))
        else:
            f.major = _dec(m.value("__GNUG__"))
        if m.defined("__GNUC_MINOR__"):
            f.minor = _dec(m.value("__GNUC_MINOR__"))
        if m.defined("__GNUC_PATCHLEVEL__"):
            f.patch = _dec(m.value("__GNUC_PATCHLEVEL__"))

    elif m.defined("_MSC_VER"):
        f.compiler_id = "MSVC"
        v = m.value("_MSC_VER")
        f.major = _dec(v // 100)
        f.minor = _dec(v % 100)
        if m.defined("_MSC_FULL_VER"):
            full = m.value("_MSC_FULL_VER")
            f.patch = _dec(full % 100000) if v >= 1400 else _dec(full % 10000)
        if m.defined("_MSC_BUILD"):
            f.tweak = _dec(m.value("_MSC_BUILD"))

    elif m.defined("_ADI_COMPILER"):
        f.compiler_id = "ADSP"
        if m.defined("__VERSIONNUM__"):
            v = m.value("__VERSIONNUM__")
            f.major = _dec((v >> 24) & 0xFF)
            f.minor = _dec((v >> 16) & 0xFF)
            f.patch = _dec((v >> 8) & 0xFF)
            f.tweak = _dec(v & 0xFF)

    elif m.defined("__IAR_SYSTEMS_ICC__", "__IAR_SYSTEMS_ICC"):
        f.compiler_id = "IAR"
        if m.defined("__VER__") and m.defined("__ICCARM__"):
            v = m.value("__VER__")
            f.major = _dec(v // 1000000)
            f.minor = _dec((v // 1000) % 1000)
            f.patch = _dec(v % 1000)
            f.internal = _dec(m.value("__IAR_SYSTEMS_ICC__"))
        elif m.defined("__VER__") and m.defined(*_IAR_SHORT_VERSION_TARGETS):
            v = m.value("__VER__")
            f.major = _dec(v // 100)
            f.minor = _dec(v - (v // 100) * 100)
            f.patch = _dec(m.value("__SUBVERSION__"))
            f.internal = _dec(m.value("__IAR_SYSTEMS_ICC__"))

    elif not cxx and m.defined("__SDCC_VERSION_MAJOR", "SDCC"):
        f.compiler_id = "SDCC"
        if m.defined("__SDCC_VERSION_MAJOR"):
            f.major = _dec(m.value("__SDCC_VERSION_MAJOR"))
            f.minor = _dec(m.value("__SDCC_VERSION_MINOR"))
            f.patch = _dec(m.value("__SDCC_VERSION_PATCH"))
        else:
            _vrp(f, m.value("SDCC"))

    elif m.defined("__hpux", "__hpua"):
        f.compiler_id = "HP"

    return f.result()


def identify_c_compiler(macros: Mapping[str, MacroValue]) -> CompilerInfo:
    """Identify a C compiler from its predefined macros.

    Raises ValueError if the macros are those of a C++ compiler, or if a
    macro needed to build the version is missing or not an integer.
    """
    table = _Macros(macros)
    if table.defined("__cplusplus"):
        raise ValueError("A C++ compiler has been selected for C.")
    return _identify(table, cxx=False)


def identify_cxx_compiler(macros: Mapping[str, MacroValue]) -> CompilerInfo:
    """Identify a C++ compiler from its predefined macros.

    Raises ValueError if ``__cplusplus`` is not among the macros, or if a
    macro needed to build the version is missing or not an integer.
    """
    table = _Macros(macros)
    if not table.defined("__cplusplus"):
        raise ValueError("A C compiler has been selected for C++.")
    return _identify(table, cxx=True)