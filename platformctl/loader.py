"""Platform file loading and descriptor output."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from jsonschema import Draft7Validator

from .errors import SpecLoadError
from .models import (
    AddonSpec,
    DirectoryConfig,
    MachineImage,
    NetworkRef,
    NodeGroupSpec,
    OSFamily,
    PlatformDescriptor,
    PlatformSpec,
    TaintEffect,
    TaintSpec,
)

logger = logging.getLogger("platformctl.loader")

_STRING_MAP = {"type": "object", "additionalProperties": {"type": "string"}}

PLATFORM_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "version": {"type": "string"},
        "region": {"type": "string"},
        "network": {
            "type": "object",
            "properties": {
                "vpcId": {"type": "string"},
                "subnetIds": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["vpcId"],
        },
        "nodeGroups": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "image": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string"},
                            "os": {"enum": [f.value for f in OSFamily]},
                        },
                        "required": ["id"],
                    },
                    "instanceTypes": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                    "min": {"type": "integer"},
                    "max": {"type": "integer"},
                    "desired": {"type": "integer"},
                    "labels": _STRING_MAP,
                    "taints": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "key": {"type": "string"},
                                "value": {"type": "string"},
                                "effect": {"enum": [e.value for e in TaintEffect]},
                            },
                            "required": ["key"],
                        },
                    },
                    "domainJoin": {"type": "boolean"},
                },
                "required": ["name", "image"],
            },
        },
        "addons": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "version": {"type": "string"},
                    "configurationValues": {"type": "object"},
                    "beforeCompute": {"type": "boolean"},
                },
                "required": ["name"],
            },
        },
        "directory": {
            "type": "object",
            "properties": {
                "domainName": {"type": "string", "minLength": 1},
                "dnsIpAddresses": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "organizationalUnit": {"type": "string"},
            },
            "required": ["domainName", "dnsIpAddresses"],
        },
        "clusterAutoscaler": {"type": "string"},
        "loadBalancerController": {"type": "string"},
        "tags": _STRING_MAP,
    },
    "required": ["name", "network"],
}


def validate_platform_data(data: Any) -> None:
    """Validate raw platform data against ``PLATFORM_SCHEMA``.

    Raises:
        SpecLoadError: listing every schema violation
    """
    validator = Draft7Validator(PLATFORM_SCHEMA)
    problems = []
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
        location = "/".join(str(p) for p in error.path) or "<root>"
        problems.append(f"{location}: {error.message}")
    if problems:
        raise SpecLoadError("Platform file failed schema validation: " + "; ".join(problems))


def parse_platform_spec(data: Dict[str, Any], default_instance_type: str = "t3.medium") -> PlatformSpec:
    """Build a ``PlatformSpec`` from an already parsed mapping."""
    validate_platform_data(data)

    node_groups = []
    for ng in data.get("nodeGroups", []):
        image = ng["image"]
        node_groups.append(NodeGroupSpec(
            name=ng["name"],
            machine_image=MachineImage(image_id=image["id"], os_family=OSFamily(image.get("os", "linux"))),
            instance_types=tuple(ng.get("instanceTypes") or (default_instance_type,)),
            min_size=ng.get("min", 1),
            max_size=ng.get("max", 3),
            desired_size=ng.get("desired", 2),
            labels=dict(ng.get("labels", {})),
            taints=tuple(
                TaintSpec(key=t["key"], value=t.get("value"), effect=TaintEffect(t.get("effect", "NO_SCHEDULE")))
                for t in ng.get("taints", [])
            ),
            enable_domain_join=ng.get("domainJoin", False),
        ))

    addons = tuple(
        AddonSpec(
            name=a["name"],
            version=a.get("version"),
            configuration_values=dict(a.get("configurationValues", {})),
            before_compute=a.get("beforeCompute", False),
        )
        for a in data.get("addons", [])
    )

    directory = None
    if "directory" in data:
        d = data["directory"]
        directory = DirectoryConfig(
            domain_name=d["domainName"],
            dns_ip_addresses=tuple(d["dnsIpAddresses"]),
            organizational_unit=d.get("organizationalUnit"),
        )

    network = data["network"]
    return PlatformSpec(
        name=data["name"],
        version=data.get("version"),
        region=data.get("region"),
        network=NetworkRef(vpc_id=network["vpcId"], subnet_ids=tuple(network.get("subnetIds", []))),
        node_groups=tuple(node_groups),
        addons=addons,
        directory=directory,
        cluster_autoscaler=data.get("clusterAutoscaler"),
        load_balancer_controller=data.get("loadBalancerController"),
        tags=dict(data.get("tags", {})),
    )


def load_platform_spec(path: Union[str, Path], default_instance_type: str = "t3.medium") -> PlatformSpec:
    """Load and validate a YAML (or JSON) platform file."""
    path = Path(path).expanduser()
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SpecLoadError(f"Cannot read platform file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Invalid YAML in {path}: {e}") from e

    logger.debug(f"📄 Loaded platform file {path}")
    return parse_platform_spec(data, default_instance_type)


class _DescriptorDumper(yaml.SafeDumper):
    pass


def _str_representer(dumper, value):
    style = "|" if "\n" in value else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", value, style=style)


_DescriptorDumper.add_representer(str, _str_representer)


def dump_descriptor(descriptor: PlatformDescriptor, fmt: str = "yaml") -> str:
    """Serialize a descriptor as YAML or JSON text."""
    data = descriptor.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2)
    if fmt == "yaml":
        return yaml.dump(data, Dumper=_DescriptorDumper, default_flow_style=False, sort_keys=False, width=float("inf"))
    raise ValueError(f"Unsupported output format: {fmt}")
