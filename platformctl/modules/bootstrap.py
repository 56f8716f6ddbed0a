"""Node bootstrap payload generation.

A node group's bootstrap payload is described by a small typed model,
``BootstrapDocument``, and rendered through one of two Jinja2 templates in
``templates/``:

- ``linux_nodeconfig.j2``: MIME multipart user data with a single
  ``application/node.eks.aws`` part holding a nodeadm ``NodeConfig``.
- ``windows_ec2launch.j2``: EC2Launch v2 task document that runs
  ``Start-EKSBootstrap.ps1``.

Rendering is deterministic: identical inputs give byte-identical output.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from ..errors import BootstrapError, MalformedLabelError
from ..models import ConnectionParams, NodeGroupSpec, OSFamily
from .capacity import DEFAULT_MAX_PODS, CapacityTable

logger = logging.getLogger("platformctl.bootstrap")

CAPACITY_TYPE = "ON_DEMAND"
MIME_BOUNDARY = "//"
NODEADM_CONTENT_TYPE = "application/node.eks.aws"

LINUX_TEMPLATE = "linux_nodeconfig.j2"
WINDOWS_TEMPLATE = "windows_ec2launch.j2"

# Kubernetes label syntax: an optional DNS subdomain prefix and a qualified name
_LABEL_NAME = re.compile(r'[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?')
_LABEL_PREFIX = re.compile(r'[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*')
MAX_LABEL_NAME_LENGTH = 63
MAX_LABEL_PREFIX_LENGTH = 253

NODEGROUP_IMAGE_LABEL = "eks.amazonaws.com/nodegroup-image"
CAPACITY_TYPE_LABEL = "eks.amazonaws.com/capacityType"
NODEGROUP_LABEL = "eks.amazonaws.com/nodegroup"


@dataclass(frozen=True)
class BootstrapDocument:
    """Everything a node needs to register with the cluster."""
    connection: ConnectionParams
    max_pods: int
    node_labels: str


def get_template_path() -> str:
    """Get the absolute path to the templates directory."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')


_environment: Optional[Environment] = None


def _get_environment() -> Environment:
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=FileSystemLoader(get_template_path()),
            undefined=StrictUndefined,
            autoescape=False,
        )
    return _environment


def _is_label_name(name: str) -> bool:
    return len(name) <= MAX_LABEL_NAME_LENGTH and _LABEL_NAME.fullmatch(name) is not None


def _label_key_problem(key: str) -> Optional[str]:
    prefix, slash, name = key.rpartition('/')
    if slash and (len(prefix) > MAX_LABEL_PREFIX_LENGTH or not _LABEL_PREFIX.fullmatch(prefix)):
        return f"has an invalid prefix {prefix!r}"
    if not _is_label_name(name):
        return f"has an invalid name {name!r}"
    return None


def validate_labels(labels: Mapping[str, str], node_group: Optional[str] = None) -> None:
    """Check label keys and values against the Kubernetes label syntax.

    Keys are an optional DNS subdomain prefix and ``/`` followed by a name of
    at most 63 alphanumeric, ``-``, ``_`` or ``.`` characters that starts and
    ends alphanumeric. Values are empty or follow the same name rules. This
    keeps separators, quotes, escapes and whitespace out of the payloads.

    Raises:
        MalformedLabelError: listing every offending key/value
    """
    where = f" on node group {node_group!r}" if node_group else ""
    errors = []
    for key, value in labels.items():
        key, value = str(key), str(value)
        if not key:
            errors.append(f"empty label key{where}")
        else:
            problem = _label_key_problem(key)
            if problem:
                errors.append(f"label key {key!r}{where} {problem}")
        if value and not _is_label_name(value):
            errors.append(f"label value {value!r} for key {key!r}{where} is not a valid label value")
    if errors:
        raise MalformedLabelError(errors)


def machine_labels(image_id: str, node_group: str) -> Dict[str, str]:
    """The three labels every node carries, in their fixed order."""
    return {
        NODEGROUP_IMAGE_LABEL: image_id,
        CAPACITY_TYPE_LABEL: CAPACITY_TYPE,
        NODEGROUP_LABEL: node_group,
    }


def validate_machine_labels(node_group: NodeGroupSpec) -> None:
    """Check the node group name and image id, which become label values."""
    validate_labels(machine_labels(node_group.machine_image.image_id, node_group.name), node_group.name)


def build_node_labels(image_id: str, node_group: str, labels: Optional[Mapping[str, str]] = None) -> str:
    """Build the comma-joined ``--node-labels`` value.

    The three machine labels always come first, in fixed order, followed by
    the caller's labels in insertion order.
    """
    node_labels = [f"{key}={value}" for key, value in machine_labels(image_id, node_group).items()]
    for key, value in (labels or {}).items():
        node_labels.append(f"{key}={value}")
    return ",".join(node_labels)


def _render(template_name: str, **context) -> str:
    try:
        template = _get_environment().get_template(template_name)
        return template.render(**context)
    except TemplateNotFound as e:
        raise BootstrapError(f"Bootstrap template not found: {e}") from e
    except TemplateSyntaxError as e:
        raise BootstrapError(f"Template syntax error: {e}") from e
    except UndefinedError as e:
        raise BootstrapError(f"Missing required template variable: {e}") from e


def render_linux(doc: BootstrapDocument) -> str:
    """Render nodeadm MIME multipart user data."""
    return _render(LINUX_TEMPLATE, doc=doc, boundary=MIME_BOUNDARY)


def render_windows(doc: BootstrapDocument) -> str:
    """Render the EC2Launch v2 bootstrap task document."""
    return _render(WINDOWS_TEMPLATE, doc=doc)


def generate_bootstrap(
    connection: ConnectionParams,
    max_pods: int,
    node_labels: str,
    os_family: OSFamily,
) -> bytes:
    """Render the bootstrap payload for one node group.

    Args:
        connection: control plane connection values
        max_pods: resolved pod ceiling for the group
        node_labels: label string from ``build_node_labels``
        os_family: selects the serializer

    Returns:
        UTF-8 encoded user data
    """
    doc = BootstrapDocument(connection=connection, max_pods=max_pods, node_labels=node_labels)
    if os_family == OSFamily.WINDOWS:
        content = render_windows(doc)
    else:
        content = render_linux(doc)
    return content.encode('utf-8')


def bootstrap_for_node_group(
    node_group: NodeGroupSpec,
    connection: ConnectionParams,
    capacity: Optional[CapacityTable] = None,
    default_max_pods: int = DEFAULT_MAX_PODS,
    check_labels: bool = True,
) -> BootstrapDocument:
    """Resolve labels and capacity for a node group into a ``BootstrapDocument``."""
    validate_machine_labels(node_group)
    if check_labels:
        validate_labels(node_group.labels, node_group.name)
    capacity = capacity or CapacityTable()
    max_pods = capacity.effective_max_pods(node_group.instance_types, default_max_pods)
    node_labels = build_node_labels(
        node_group.machine_image.image_id, node_group.name, node_group.labels
    )
    logger.debug(f"Node group {node_group.name}: maxPods={max_pods} labels={node_labels}")
    return BootstrapDocument(connection=connection, max_pods=max_pods, node_labels=node_labels)
