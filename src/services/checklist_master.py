"""Checklist master - the static 101-item building condition checklist."""
from typing import Dict, List, Optional, Tuple

from src.models.checklist import (
    ChecklistCategory,
    ChecklistItem,
    EvaluationType,
    ItemOptionDefinition,
    MaintenanceItemDefinition,
    MaintenanceSubGroup,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Categories that are always surveyed (site/ground, management, legality)
CATEGORIES_WITHOUT_SURVEY_TOGGLE = frozenset({"cat1", "cat6", "cat7"})

# Items needing special equipment get their own conducted toggle
# item95: rebar scan, item96: Schmidt hammer
ITEMS_WITH_SURVEY_TOGGLE = frozenset({"item95", "item96"})

# Groups whose existence toggle was retired; never disabled by existence
LEGACY_GROUPS = frozenset({"group_kiso", "group_gaiheki", "group_yane", "group_okujou"})

KISO_GROUP_ID = "group_kiso"
KISO_FINISH_MATERIALS = (
    "コンクリート直仕上げ",
    "モルタル仕上げ・その他塗り仕上げ",
    "その他仕上げ",
)

# Outdoor steel stair: item72 carries the presence option for the group
STAIR_GROUP_ID = "group_okugai_kaidan"
STAIR_OPTION_ITEM_ID = "item72"
STAIR_OPTION_LABEL = "設置"
STAIR_NOT_APPLICABLE = "該当無"

MAINTENANCE_ITEMS: Tuple[MaintenanceItemDefinition, ...] = (
    MaintenanceItemDefinition(
        id="maint_cat1",
        label="外部① 敷地及び地盤",
        sub_label="地盤、敷地、擁壁、駐車場、建物周囲の有無",
    ),
    MaintenanceItemDefinition(
        id="maint_cat2",
        label="外部② 各点検口内",
        sub_groups=[
            MaintenanceSubGroup(label="床下点検口※1", group_id="group_yukashita"),
            MaintenanceSubGroup(label="小屋裏・天井点検口※1", group_id="group_koyaura"),
        ],
    ),
    MaintenanceItemDefinition(
        id="maint_cat3",
        label="外部③ 建築物外部",
        sub_label="基礎、外壁、屋外階段（鉄骨）、共用部の廊下、バルコニー、エントランスホール、階段",
    ),
    MaintenanceItemDefinition(
        id="maint_cat4",
        label="外部④ 屋根及び屋上（目視）",
        sub_groups=[
            MaintenanceSubGroup(label="屋根※1", group_id="group_yane"),
            MaintenanceSubGroup(label="屋上※1", group_id="group_okujou"),
        ],
    ),
    MaintenanceItemDefinition(id="maint_cat5", label="外部⑤ 共用部内装", sub_label="室内部"),
)

_STAIR_PRESENCE = ItemOptionDefinition(label=STAIR_OPTION_LABEL, choices=["該当有", STAIR_NOT_APPLICABLE])

_S = EvaluationType.STANDARD

# (num, name, desc, eval_type, group_id, finish_material_key, options)
_RowT = Tuple[int, str, str, EvaluationType, Optional[str], Optional[str], Tuple[ItemOptionDefinition, ...]]


def _row(
    num: int,
    name: str,
    desc: str = "",
    eval_type: EvaluationType = _S,
    group: Optional[str] = None,
    finish: Optional[str] = None,
    options: Tuple[ItemOptionDefinition, ...] = (),
) -> _RowT:
    return (num, name, desc, eval_type, group, finish, options)


_GROUP_LABELS: Dict[str, str] = {
    "group_youheki": "擁壁",
    "group_chushajo": "駐車場",
    "group_churinjo": "駐輪場",
    "group_yukashita": "床下点検口",
    "group_koyaura": "小屋裏・天井点検口",
    "group_kiso": "基礎",
    "group_gaiheki": "外壁",
    "group_kyoyou_rouka": "共用部の廊下",
    "group_balcony": "バルコニー",
    "group_entrance": "エントランスホール・階段",
    "group_okugai_kaidan": "屋外階段（鉄骨）",
    "group_yane": "屋根",
    "group_okujou": "屋上",
}

_CONCRETE, _MORTAR, _OTHER_FINISH = KISO_FINISH_MATERIALS

_CATEGORY_ROWS: List[Tuple[str, str, str, List[_RowT]]] = [
    ("cat1", "敷地及び地盤", "敷地", [
        _row(1, "地盤", "沈下・陥没・隆起の有無"),
        _row(2, "敷地", "排水不良・舗装のひび割れ"),
        _row(3, "擁壁本体", "ひび割れ・欠損", group="group_youheki"),
        _row(4, "擁壁水抜き穴", "詰まり・排水不良", group="group_youheki"),
        _row(5, "擁壁形状", "傾斜・はらみ", group="group_youheki"),
        _row(6, "駐車場舗装", "ひび割れ・不陸", group="group_chushajo"),
        _row(7, "駐車場付帯物", "白線・輪止めの劣化", group="group_chushajo"),
        _row(8, "駐輪場架台", "屋根・架台の錆・変形", group="group_churinjo"),
        _row(9, "駐輪場床面", "ひび割れ・不陸", group="group_churinjo"),
        _row(10, "建物周囲", "外構・フェンスの劣化"),
    ]),
    ("cat2", "各点検口内", "点検口", [
        _row(11, "土台", "腐朽・蟻害", group="group_yukashita"),
        _row(12, "大引・床束", "腐朽・ずれ", group="group_yukashita"),
        _row(13, "床下基礎内側", "ひび割れ・欠損", group="group_yukashita"),
        _row(14, "床下配管", "漏水・結露", group="group_yukashita"),
        _row(15, "床下断熱材", "脱落・欠損", group="group_yukashita"),
        _row(16, "床下地盤面", "湿潤・滞水", group="group_yukashita"),
        _row(17, "床下換気", "換気不足・閉塞", group="group_yukashita"),
        _row(18, "床下金物", "錆・緩み", group="group_yukashita"),
        _row(19, "小屋組", "腐朽・割れ", group="group_koyaura"),
        _row(20, "野地板", "雨漏り跡・腐朽", group="group_koyaura"),
        _row(21, "小屋裏断熱材", "脱落・欠損", group="group_koyaura"),
        _row(22, "小屋裏換気口", "閉塞・破損", group="group_koyaura"),
        _row(23, "小屋裏金物", "錆・緩み", group="group_koyaura"),
        _row(24, "天井裏配線・配管", "漏水・損傷", group="group_koyaura"),
    ]),
    ("cat3", "建築物外部", "外部", [
        _row(25, "基礎ひび割れ", "幅0.5mm以上のひび割れ", group="group_kiso"),
        _row(26, "基礎欠損", "欠損・剥落", group="group_kiso"),
        _row(27, "基礎鉄筋露出", "鉄筋の露出・錆汁", group="group_kiso"),
        _row(28, "コンクリート面の豆板", "ジャンカ・空洞", group="group_kiso", finish=_CONCRETE),
        _row(29, "コンクリート面の白華", "エフロレッセンス", group="group_kiso", finish=_CONCRETE),
        _row(30, "塗り仕上げの浮き", "モルタル等の浮き", group="group_kiso", finish=_MORTAR),
        _row(31, "塗り仕上げの剥離", "モルタル等の剥離・剥落", group="group_kiso", finish=_MORTAR),
        _row(32, "その他仕上げの劣化", "仕上げ材の劣化", group="group_kiso", finish=_OTHER_FINISH),
        _row(33, "その他仕上げの剥がれ", "仕上げ材の浮き・剥がれ", group="group_kiso", finish=_OTHER_FINISH),
        _row(34, "外壁ひび割れ", "幅0.5mm以上のひび割れ", group="group_gaiheki"),
        _row(35, "外壁欠損", "欠損・剥落", group="group_gaiheki"),
        _row(36, "外壁浮き", "仕上げ材の浮き", group="group_gaiheki"),
        _row(37, "外壁剥離", "仕上げ材の剥離", group="group_gaiheki"),
        _row(38, "外壁錆汁", "鉄筋・金物の錆汁", group="group_gaiheki"),
        _row(39, "外壁白華", "エフロレッセンス", group="group_gaiheki"),
        _row(40, "シーリング破断", "破断・亀裂", group="group_gaiheki"),
        _row(41, "シーリング剥離", "被着面からの剥離", group="group_gaiheki"),
        _row(42, "外壁変退色", "著しい変退色", group="group_gaiheki"),
        _row(43, "チョーキング", "塗膜の白亜化", group="group_gaiheki"),
        _row(44, "サイディング反り", "反り・目地ずれ", group="group_gaiheki"),
        _row(45, "開口部周り", "開口部隅角のひび割れ", group="group_gaiheki"),
        _row(46, "軒裏", "雨染み・剥がれ", group="group_gaiheki"),
        _row(47, "雨樋", "破損・外れ", group="group_gaiheki"),
        _row(48, "換気フード", "破損・錆", group="group_gaiheki"),
        _row(49, "外壁鉄部", "錆・腐食", group="group_gaiheki"),
        _row(50, "外壁付属物", "取付部の緩み・破損", group="group_gaiheki"),
        _row(51, "共用廊下床", "ひび割れ・防水層の劣化", group="group_kyoyou_rouka"),
        _row(52, "共用廊下壁", "ひび割れ・浮き", group="group_kyoyou_rouka"),
        _row(53, "共用廊下天井", "雨染み・剥落", group="group_kyoyou_rouka"),
        _row(54, "共用廊下手すり", "錆・ぐらつき", group="group_kyoyou_rouka"),
        _row(55, "共用廊下排水溝", "詰まり・破損", group="group_kyoyou_rouka"),
        _row(56, "共用廊下照明", "破損・不点灯", group="group_kyoyou_rouka"),
        _row(57, "共用廊下扉", "開閉不良・錆", group="group_kyoyou_rouka"),
        _row(58, "共用廊下幅木", "浮き・剥がれ", group="group_kyoyou_rouka"),
        _row(59, "共用廊下目地", "シーリングの劣化", group="group_kyoyou_rouka"),
        _row(60, "共用廊下鉄部", "錆・腐食", group="group_kyoyou_rouka"),
        _row(61, "バルコニー床", "防水層の劣化", group="group_balcony"),
        _row(62, "バルコニー手すり", "錆・ぐらつき", group="group_balcony"),
        _row(63, "バルコニー排水", "ドレンの詰まり", group="group_balcony"),
        _row(64, "バルコニー天井", "雨染み・剥落", group="group_balcony"),
        _row(65, "バルコニー隔板", "破損", group="group_balcony"),
        _row(66, "バルコニー笠木", "浮き・錆", group="group_balcony"),
        _row(67, "エントランス床", "ひび割れ・浮き", group="group_entrance"),
        _row(68, "エントランス壁", "ひび割れ・剥がれ", group="group_entrance"),
        _row(69, "エントランス扉", "開閉不良・破損", group="group_entrance"),
        _row(70, "共用階段", "段鼻・踏面の破損", group="group_entrance"),
        _row(71, "共用階段手すり", "錆・ぐらつき", group="group_entrance"),
        _row(72, "屋外階段本体", "設置状況・本体の錆・腐食", group=STAIR_GROUP_ID, options=(_STAIR_PRESENCE,)),
        _row(73, "屋外階段踏板", "錆・腐食・たわみ", group=STAIR_GROUP_ID),
        _row(74, "屋外階段手すり", "錆・ぐらつき", group=STAIR_GROUP_ID),
        _row(75, "屋外階段接合部", "ボルトの緩み・溶接部の錆", group=STAIR_GROUP_ID),
        _row(76, "屋外階段塗装", "塗膜の剥がれ", group=STAIR_GROUP_ID),
        _row(77, "外部建具", "サッシ・シャッターの開閉不良"),
        _row(78, "外部手すり", "錆・ぐらつき"),
    ]),
    ("cat4", "屋根及び屋上", "屋根", [
        _row(79, "屋根葺き材", "割れ・ずれ・欠損", group="group_yane"),
        _row(80, "屋根棟部", "棟板金の浮き・釘抜け", group="group_yane"),
        _row(81, "屋根谷部", "錆・腐食", group="group_yane"),
        _row(82, "屋根塗装", "変退色・剥がれ", group="group_yane"),
        _row(83, "屋根付属物", "アンテナ等の取付不良", group="group_yane"),
        _row(84, "屋上防水層", "膨れ・破断", group="group_okujou"),
        _row(85, "屋上排水", "ドレンの詰まり", group="group_okujou"),
        _row(86, "パラペット", "ひび割れ・笠木の浮き", group="group_okujou"),
        _row(87, "屋上設備基礎", "ひび割れ・錆", group="group_okujou"),
        _row(88, "屋上手すり", "錆・ぐらつき", group="group_okujou"),
    ]),
    ("cat5", "室内部", "室内", [
        _row(89, "室内床", "傾斜・沈み・きしみ"),
        _row(90, "室内壁", "ひび割れ・雨染み"),
        _row(91, "室内天井", "雨漏り跡・剥がれ"),
        _row(92, "室内建具", "開閉不良・建付け不良"),
        _row(93, "室内設備配管", "漏水・錆"),
        _row(94, "室内換気設備", "作動不良・汚損"),
        _row(95, "鉄筋探査", "配筋のピッチ", eval_type=EvaluationType.REBAR),
        _row(96, "コンクリート強度", "シュミットハンマーによる反発度", eval_type=EvaluationType.SCHMIDT),
    ]),
    ("cat6", "管理状況", "管理", [
        _row(97, "清掃状況", "共用部の日常清掃", eval_type=EvaluationType.MANAGEMENT),
        _row(98, "点検状況", "法定点検・定期点検の実施", eval_type=EvaluationType.MANAGEMENT),
        _row(99, "掲示・設備管理", "掲示物・共用設備の管理", eval_type=EvaluationType.MANAGEMENT),
    ]),
    ("cat7", "違法性関係", "違法性", [
        _row(100, "増築・用途変更", "確認申請との相違の懸念", eval_type=EvaluationType.LEGAL),
        _row(101, "不適合箇所", "その他法令不適合と思われる箇所", eval_type=EvaluationType.FREETEXT),
    ]),
]


def _build_categories() -> List[ChecklistCategory]:
    categories: List[ChecklistCategory] = []
    labelled_groups = set()
    for cat_id, name, short_name, rows in _CATEGORY_ROWS:
        items = []
        for num, item_name, desc, eval_type, group_id, finish, options in rows:
            group_label = None
            if group_id and group_id not in labelled_groups:
                group_label = _GROUP_LABELS.get(group_id)
                labelled_groups.add(group_id)
            items.append(ChecklistItem(
                id=f"item{num}",
                num=num,
                name=item_name,
                desc=desc,
                eval_type=eval_type,
                group_id=group_id,
                group_label=group_label,
                finish_material_key=finish,
                options=list(options),
            ))
        categories.append(ChecklistCategory(id=cat_id, name=name, short_name=short_name, items=items))
    return categories


class ChecklistMaster:
    """Read-only index over the checklist categories and items."""

    def __init__(self, categories: Optional[List[ChecklistCategory]] = None):
        self.categories: Tuple[ChecklistCategory, ...] = tuple(categories or _build_categories())
        self._categories_by_id: Dict[str, ChecklistCategory] = {c.id: c for c in self.categories}
        self._items_by_id: Dict[str, Tuple[ChecklistItem, ChecklistCategory]] = {}
        self._groups: Dict[str, List[ChecklistItem]] = {}
        for category in self.categories:
            for item in category.items:
                self._items_by_id[item.id] = (item, category)
                if item.group_id:
                    self._groups.setdefault(item.group_id, []).append(item)
        self._maintenance_ids = frozenset(m.id for m in MAINTENANCE_ITEMS)
        logger.info("Checklist master loaded",
                    category_count=len(self.categories),
                    item_count=len(self._items_by_id),
                    group_count=len(self._groups))

    def get_category(self, category_id: str) -> Optional[ChecklistCategory]:
        return self._categories_by_id.get(category_id)

    def get_item(self, item_id: str) -> Optional[Tuple[ChecklistItem, ChecklistCategory]]:
        """Look up an item with its owning category."""
        return self._items_by_id.get(item_id)

    def items_in_group(self, group_id: str) -> List[ChecklistItem]:
        return list(self._groups.get(group_id, []))

    def has_group(self, group_id: str) -> bool:
        return group_id in self._groups

    def is_known_target(self, target_id: str) -> bool:
        """Option stores accept both item ids and group ids as keys."""
        return target_id in self._items_by_id or target_id in self._groups

    def is_maintenance_id(self, maintenance_id: str) -> bool:
        return maintenance_id in self._maintenance_ids

    @property
    def maintenance_items(self) -> Tuple[MaintenanceItemDefinition, ...]:
        return MAINTENANCE_ITEMS

    def total_item_count(self) -> int:
        return len(self._items_by_id)


# Global singleton instance
_checklist_master: Optional[ChecklistMaster] = None


def get_checklist_master() -> ChecklistMaster:
    """Get the global checklist master instance.

    Returns:
        ChecklistMaster singleton
    """
    global _checklist_master
    if _checklist_master is None:
        _checklist_master = ChecklistMaster()
    return _checklist_master
