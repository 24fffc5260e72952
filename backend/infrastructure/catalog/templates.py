"""
Reference BOMs of the product line.

Each product is a laptop broken down as
unit > module > sub-module > family > group > primary part > substitute.
Node mappings use the wire (camelCase) field names and are normalized when
the catalog loads them.
"""

from typing import Any, Dict, List, Optional


def _part(
    title: str,
    part_id: str,
    cost: int,
    supplier: str,
    position: str,
    unit: str = "piece",
    quantity: int = 1,
    lifecycle: str = "MassProduction",
    substitute: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "title": title,
        "partId": part_id,
        "quantity": quantity,
        "unit": unit,
        "cost": cost,
        "supplier": supplier,
        "lifecycle": lifecycle,
        "position": position,
        "children": [substitute] if substitute else [],
    }


def _sub_module(key: str, title: str, family: str, primary: Dict[str, Any]) -> Dict[str, Any]:
    """Sub-module holding a single family/group chain down to one position."""
    group_key = f"{key}-family-group"
    primary = dict(primary, key=f"{group_key}-main")
    if primary["children"]:
        primary["children"] = [dict(primary["children"][0], key=f"{group_key}-main-alt")]
    return {
        "key": key,
        "title": title,
        "children": [{
            "key": f"{key}-family",
            "title": f"{family} family",
            "children": [{
                "key": group_key,
                "title": f"{family} group",
                "children": [primary],
            }],
        }],
    }


def _module(key: str, title: str, sub_modules: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"key": key, "title": title, "children": sub_modules}


PRODUCT_TEMPLATES: List[Dict[str, Any]] = [
    {
        "name": "ThinkPad X1 Carbon Gen12",
        "description": "12th generation X1 Carbon business flagship",
        "version": "v1.1",
        "last_updated": "2024-01-15",
        "structure": [{
            "key": "x1c12",
            "title": "ThinkPad X1 Carbon Gen12",
            "children": [
                _module("x1c12-board", "Mainboard", [
                    _sub_module("x1c12-board-cpu", "CPU module", "Processor", _part(
                        "Intel Core i7-1260P", "CPU-1260P",
                        2599, "Intel", "U1.A",
                        substitute=_part(
                            "Intel Core i5-1240P", "CPU-1240P",
                            1899, "Intel", "U1.A.1",
                        ),
                    )),
                    _sub_module("x1c12-board-mem", "Memory module", "Memory", _part(
                        "16GB LPDDR5 5200MHz", "MEM-LPDDR5-16GB",
                        899, "Samsung", "M1.A",
                        substitute=_part(
                            "32GB LPDDR5 5200MHz", "MEM-LPDDR5-32GB",
                            1699, "Samsung", "M1.A.1",
                        ),
                    )),
                    _sub_module("x1c12-board-ssd", "Storage module", "Storage", _part(
                        "1TB NVMe SSD", "SSD-NVME-1TB",
                        799, "Western Digital", "S1.A",
                        substitute=_part(
                            "512GB NVMe SSD", "SSD-NVME-512GB",
                            499, "Western Digital", "S1.A.1",
                        ),
                    )),
                ]),
                _module("x1c12-power", "Power", [
                    _sub_module("x1c12-power-bat", "Battery module", "Battery", _part(
                        "57Wh Li-ion battery", "BAT-57WH",
                        1299, "LG Chem", "B1.A",
                    )),
                    _sub_module("x1c12-power-adp", "Adapter module", "Adapter", _part(
                        "65W USB-C adapter", "ADP-65W-USBC",
                        299, "Lenovo", "A1.A",
                    )),
                ]),
                _module("x1c12-chassis", "Enclosure", [
                    _sub_module("x1c12-chassis-dsp", "Display module", "Display", _part(
                        "14in 2.8K OLED panel", "DSP-14-2K8-OLED",
                        1599, "Samsung", "D1.A",
                    )),
                    _sub_module("x1c12-chassis-case", "Housing module", "Housing", _part(
                        "Carbon fibre chassis", "CHS-CARBON",
                        899, "Lenovo", "C1.A",
                    )),
                ]),
            ],
        }],
    },
    {
        "name": "ThinkPad T14 Gen3",
        "description": "Mainstream business notebook",
        "version": "v1.0",
        "last_updated": "2023-09-20",
        "structure": [{
            "key": "t14g3",
            "title": "ThinkPad T14 Gen3",
            "children": [
                _module("t14g3-board", "Mainboard", [
                    _sub_module("t14g3-board-cpu", "CPU module", "Processor", _part(
                        "Intel Core i5-1235U", "CPU-1235U",
                        1899, "Intel", "U1.A",
                        substitute=_part(
                            "Intel Core i7-1255U", "CPU-1255U",
                            2399, "Intel", "U1.A.1",
                        ),
                    )),
                    _sub_module("t14g3-board-mem", "Memory module", "Memory", _part(
                        "8GB DDR4 3200MHz", "MEM-DDR4-8GB",
                        399, "Crucial", "M1.A",
                        substitute=_part(
                            "16GB DDR4 3200MHz", "MEM-DDR4-16GB",
                            699, "Crucial", "M1.A.1",
                        ),
                    )),
                ]),
            ],
        }],
    },
    {
        "name": "Legion Slim 7 Gen8",
        "description": "Gaming notebook",
        "version": "v1.0",
        "last_updated": "2023-06-05",
        "structure": [{
            "key": "lg7g8",
            "title": "Legion Slim 7 Gen8",
            "children": [
                _module("lg7g8-board", "Mainboard", [
                    _sub_module("lg7g8-board-cpu", "CPU module", "Processor", _part(
                        "Intel Core i9-13900HX", "CPU-13900HX",
                        3999, "Intel", "U1.A",
                    )),
                    _sub_module("lg7g8-board-gpu", "GPU module", "Graphics", _part(
                        "NVIDIA RTX 4070", "GPU-RTX4070",
                        4999, "NVIDIA", "G1.A",
                        lifecycle="R&D",
                    )),
                ]),
            ],
        }],
    },
]
