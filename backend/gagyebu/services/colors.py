import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PaletteColor:
    id: str
    name: str
    hex: str
    bg: str
    text: str


TAG_COLORS: tuple[PaletteColor, ...] = (
    PaletteColor("red", "빨강", "#ef4444", "#fef2f2", "#991b1b"),
    PaletteColor("blue", "파랑", "#3b82f6", "#eff6ff", "#1e40af"),
    PaletteColor("green", "초록", "#10b981", "#f0fdf4", "#059669"),
    PaletteColor("yellow", "노랑", "#f59e0b", "#fffbeb", "#d97706"),
    PaletteColor("purple", "보라", "#8b5cf6", "#f5f3ff", "#7c3aed"),
    PaletteColor("pink", "분홍", "#ec4899", "#fdf2f8", "#be185d"),
    PaletteColor("indigo", "남색", "#6366f1", "#eef2ff", "#4338ca"),
    PaletteColor("teal", "청록", "#14b8a6", "#f0fdfa", "#0f766e"),
    PaletteColor("orange", "주황", "#f97316", "#fff7ed", "#ea580c"),
    PaletteColor("cyan", "하늘", "#06b6d4", "#ecfeff", "#0891b2"),
    PaletteColor("rose", "장미", "#f43f5e", "#fff1f2", "#e11d48"),
    PaletteColor("amber", "호박", "#f59e0b", "#fffbeb", "#d97706"),
    PaletteColor("lime", "라임", "#84cc16", "#f7fee7", "#65a30d"),
    PaletteColor("emerald", "에메랄드", "#10b981", "#ecfdf5", "#059669"),
    PaletteColor("violet", "제비꽃", "#8b5cf6", "#f5f3ff", "#7c3aed"),
    PaletteColor("sky", "하늘색", "#0ea5e9", "#f0f9ff", "#0284c7"),
    PaletteColor("slate", "청회색", "#64748b", "#f8fafc", "#475569"),
    PaletteColor("gray", "회색", "#6b7280", "#f9fafb", "#4b5563"),
    PaletteColor("zinc", "아연색", "#71717a", "#fafafa", "#52525b"),
    PaletteColor("stone", "돌색", "#78716c", "#fafaf9", "#57534e"),
    PaletteColor("brown", "갈색", "#92400e", "#fef3c7", "#92400e"),
    PaletteColor("coffee", "커피색", "#78350f", "#fef3c7", "#78350f"),
    PaletteColor("chocolate", "초콜릿", "#a16207", "#fefce8", "#a16207"),
    PaletteColor("sand", "모래색", "#ca8a04", "#fefce8", "#ca8a04"),
    PaletteColor("gold", "금색", "#eab308", "#fefce8", "#a16207"),
    PaletteColor("mint", "민트", "#6ee7b7", "#f0fdf4", "#065f46"),
    PaletteColor("lavender", "라벤더", "#c4b5fd", "#f5f3ff", "#6d28d9"),
    PaletteColor("peach", "복숭아", "#fdba74", "#fff7ed", "#c2410c"),
    PaletteColor("coral", "산호", "#fb7185", "#fff1f2", "#be123c"),
    PaletteColor("sage", "세이지", "#84d3ae", "#f0fdf4", "#065f46"),
)

# Seeded into every new household.
DEFAULT_HOUSEHOLD_TAGS: tuple[tuple[str, str], ...] = (
    ("식비", "red"),
    ("교통비", "blue"),
    ("쇼핑", "pink"),
    ("생활용품", "green"),
    ("의료비", "purple"),
    ("통신비", "indigo"),
    ("문화생활", "orange"),
    ("교육비", "teal"),
    ("여행", "cyan"),
    ("용돈", "yellow"),
    ("급여", "emerald"),
    ("부수입", "lime"),
    ("투자", "violet"),
    ("저축", "sky"),
    ("기타", "gray"),
)

# Fixed vocabulary offered to the tag suggestion helper.
DEFAULT_EXPENSE_TAGS: tuple[str, ...] = (
    "식비",
    "교통비",
    "생활용품",
    "공과금",
    "엔터테인먼트",
    "의료비",
    "교육비",
    "의류",
    "주거비",
    "보험료",
)
DEFAULT_INCOME_TAGS: tuple[str, ...] = ("급여", "부업", "투자수익", "정부지원금", "기타수입")
SUGGESTION_TAGS: tuple[str, ...] = DEFAULT_EXPENSE_TAGS + DEFAULT_INCOME_TAGS

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def get_tag_color(color_id: str) -> PaletteColor | None:
    return next((color for color in TAG_COLORS if color.id == color_id), None)


def get_tag_color_by_hex(color_hex: str) -> PaletteColor | None:
    lowered = color_hex.lower()
    return next((color for color in TAG_COLORS if color.hex == lowered), None)


def get_default_tag_color() -> PaletteColor:
    return TAG_COLORS[0]


def get_next_available_color(used_color_ids: list[str] | set[str]) -> PaletteColor:
    used = set(used_color_ids)
    available = next((color for color in TAG_COLORS if color.id not in used), None)
    return available or get_default_tag_color()


def is_valid_hex_color(value: str | None) -> bool:
    return bool(value and HEX_COLOR_PATTERN.match(value))
