"""
Built-in shape library.

Behaviors live in the category modules (basic, flowchart, network, uml,
containers, arrows, text); configuration documents are packaged as JSON
under configs/. The loader resolves both through BUILTIN_LIBRARY.
"""

from pathlib import Path

from ..models import ShapeSource

CONFIG_DIR = Path(__file__).parent / "configs"

_BEHAVIORS = {
    "basic": {
        "basic-rectangle": "RECTANGLE",
        "basic-circle": "CIRCLE",
        "basic-ellipse": "ELLIPSE",
        "basic-diamond": "DIAMOND",
        "basic-triangle": "TRIANGLE",
        "basic-polygon": "POLYGON",
        "basic-star": "STAR",
    },
    "flowchart": {
        "flowchart-process": "PROCESS",
        "flowchart-decision": "DECISION",
        "flowchart-terminator": "TERMINATOR",
        "flowchart-data": "DATA",
        "flowchart-document": "DOCUMENT",
        "flowchart-manual-input": "MANUAL_INPUT",
        "flowchart-preparation": "PREPARATION",
        "flowchart-display": "DISPLAY",
        "flowchart-predefined-process": "PREDEFINED_PROCESS",
    },
    "network": {
        "network-database": "DATABASE",
        "network-cloud": "CLOUD",
        "network-router": "ROUTER",
        "network-server": "SERVER",
        "network-switch": "SWITCH",
        "network-firewall": "FIREWALL",
        "network-workstation": "WORKSTATION",
    },
    "uml": {
        "uml-actor": "ACTOR",
        "uml-class": "CLASS",
        "uml-component": "COMPONENT",
        "uml-interface": "INTERFACE",
        "uml-package": "PACKAGE",
    },
    "containers": {
        "containers-frame": "FRAME",
        "containers-group": "GROUP",
        "containers-swimlane": "SWIMLANE",
    },
    "arrows": {
        "arrows-straight-arrow": "STRAIGHT_ARROW",
        "arrows-double-arrow": "DOUBLE_ARROW",
        "arrows-curved-arrow": "CURVED_ARROW",
        "arrows-block-arrow": "BLOCK_ARROW",
    },
    "text": {
        "text-label": "LABEL",
        "text-callout": "CALLOUT",
        "text-note": "NOTE",
    },
}

BUILTIN_LIBRARY: dict[str, list[ShapeSource]] = {
    category: [
        ShapeSource(
            type_id=type_id,
            behavior=f"{__name__}.{category}:{attribute}",
            config=f"{type_id}.json",
        )
        for type_id, attribute in types.items()
    ]
    for category, types in _BEHAVIORS.items()
}

__all__ = ["BUILTIN_LIBRARY", "CONFIG_DIR"]
