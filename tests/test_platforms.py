import pytest

from tickstream.compilerid.platforms import identify_architecture, identify_platform


@pytest.mark.parametrize(
    "macros, expected",
    [
        ({"__linux__": 1}, "Linux"),
        ({"linux": 1}, "Linux"),
        ({"__APPLE__": 1}, "Darwin"),
        ({"_WIN32": 1}, "Windows"),
        ({"__FreeBSD__": 14}, "FreeBSD"),
        ({"__hpux": 1}, "HP-UX"),
        ({"_SCO_SV": 1}, "SCO_SV"),
        ({"__QNXNTO__": 1}, "QNX"),
    ],
)
def test_known_platforms(macros, expected):
    assert identify_platform(macros) == expected


def test_unknown_platform_is_empty():
    assert identify_platform({}) == ""
    assert identify_platform({"__clang__": 1}) == ""


def test_platform_order_prefers_earlier_branch():
    assert identify_platform({"__MSYS__": 1, "__CYGWIN__": 1, "_WIN32": 1}) == "MSYS"
    assert identify_platform({"__MINGW32__": 1, "_WIN32": 1}) == "MinGW"
    assert identify_platform({"__linux__": 1, "__WATCOMC__": 1300}) == "Linux"


def test_watcom_platforms():
    assert identify_platform({"__WATCOMC__": 1300, "__DOS__": 1}) == "DOS"
    assert identify_platform({"__WATCOMC__": 1300, "__WINDOWS__": 1}) == "Windows3x"
    assert identify_platform({"__WATCOMC__": 1300}) == ""


def test_integrity_and_adsp():
    assert identify_platform({"__INTEGRITY": 1}) == "Integrity"
    assert identify_platform({"__INTEGRITY": 1, "INT_178B": 1}) == "Integrity178"
    assert identify_platform({"_ADI_COMPILER": 1}) == "ADSP"


@pytest.mark.parametrize(
    "macros, expected",
    [
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_X64": 100}, "x64"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_AMD64": 100}, "x64"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_ARM64": 1}, "ARM64"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_ARM64EC": 1, "_M_X64": 100}, "ARM64EC"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_IX86": 600}, "X86"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_ARM": 4}, "ARMV4I"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_ARM": 5}, "ARMV5I"),
        ({"_WIN32": 1, "_MSC_VER": 1930, "_M_MIPS": 1}, "MIPS"),
    ],
)
def test_msvc_architectures(macros, expected):
    assert identify_architecture(macros) == expected


def test_msvc_arm_other_level_is_stringified():
    macros = {"_WIN32": 1, "_MSC_VER": 1930, "_M_ARM": 7}
    assert identify_architecture(macros) == "ARMV" + str(macros["_M_ARM"])


def test_msvc_arm_non_integer_raises():
    with pytest.raises(ValueError):
        identify_architecture({"_WIN32": 1, "_MSC_VER": 1930, "_M_ARM": "abc"})


def test_msvc_unknown_arch_and_non_msvc_are_empty():
    assert identify_architecture({"_WIN32": 1, "_MSC_VER": 1930}) == ""
    assert identify_architecture({"_WIN32": 1, "_M_X64": 100}) == ""
    assert identify_architecture({"__clang__": 1, "__aarch64__": 1}) == ""


def test_other_toolchains():
    assert identify_architecture({"__WATCOMC__": 1300, "_M_I86": 1}) == "I86"
    assert identify_architecture({"__WATCOMC__": 1300, "_M_IX86": 1}) == "X86"
    assert identify_architecture({"__IAR_SYSTEMS_ICC__": 9, "__ICCARM__": 1}) == "ARM"
    assert identify_architecture({"__IAR_SYSTEMS_ICC": 9, "__ICC430__": 1}) == "MSP430"
    assert identify_architecture({"__ghs__": 1, "__x86_64__": 1}) == "x64"
    assert identify_architecture({"__clang__": 1, "__ti__": 1, "__ARM_ARCH": 7}) == "ARM"
    assert identify_architecture({"__clang__": 1, "__ti__": 1}) == ""
    assert identify_architecture({"__TI_COMPILER_VERSION__": 1, "_TMS320C6X": 1}) == "TMS320C6x"
    assert identify_architecture({"__ADSPSHARC__": 1}) == "SHARC"
    assert identify_architecture({"__ADSPBLACKFIN__": 1}) == "Blackfin"
    assert identify_architecture({"__TASKING__": 1, "__CPTC__": 1}) == "TriCore"
    assert identify_architecture({"__TASKING__": 1}) == ""


def test_ghs_priority_order():
    assert identify_architecture({"__ghs__": 1, "__PPC64__": 1, "__ppc__": 1}) == "PPC64"