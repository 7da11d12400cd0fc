"""Free-form item options and per-group finish material selections."""
from typing import List, Optional, Sequence

from src.models.inspection import OptionValue, PropertyInspectionData


def get_item_option(data: PropertyInspectionData, target_id: str, label: str) -> Optional[OptionValue]:
    """Option value for an item or group; empty values read as unset."""
    value = data.options.get(target_id, {}).get(label)
    if value in ("", []):
        return None
    return value


def set_item_option(data: PropertyInspectionData, target_id: str, label: str, value: OptionValue) -> None:
    stored = list(value) if isinstance(value, (list, tuple)) else value
    data.options.setdefault(target_id, {})[label] = stored


def get_finish_materials(data: PropertyInspectionData, group_id: str) -> List[str]:
    return list(data.finish_materials.get(group_id, []))


def set_finish_materials(data: PropertyInspectionData, group_id: str, materials: Sequence[str]) -> List[str]:
    # Keep first-seen order, drop duplicates
    selected = list(dict.fromkeys(materials))
    data.finish_materials[group_id] = selected
    return selected


def toggle_finish_material(data: PropertyInspectionData, group_id: str, material: str) -> List[str]:
    current = get_finish_materials(data, group_id)
    if material in current:
        current.remove(material)
    else:
        current.append(material)
    return set_finish_materials(data, group_id, current)
