"""AUTOSAR element names recognized by the model builder.

Anything not listed here is kept as an opaque pass-through node.
"""

from arxport.models.arxml import AccessKind, PortDirection
from arxport.models.element import Element

AUTOSAR_NAMESPACE_PREFIX = "http://autosar.org/"

ROOT = "AUTOSAR"
SHORT_NAME = "SHORT-NAME"
AR_PACKAGES = "AR-PACKAGES"
AR_PACKAGE = "AR-PACKAGE"
ELEMENTS = "ELEMENTS"

# Documentation children read into annotations, never treated as opaque
DESC = "DESC"
INTRODUCTION = "INTRODUCTION"
ADMIN_DATA = "ADMIN-DATA"
SDGS = "SDGS"
SDG = "SDG"
SD = "SD"
GID = "GID"
DOCUMENTATION_TAGS = frozenset({DESC, INTRODUCTION, ADMIN_DATA, "LONG-NAME", "CATEGORY"})

COMPONENT_TAGS = frozenset({
    "APPLICATION-SW-COMPONENT-TYPE",
    "COMPOSITION-SW-COMPONENT-TYPE",
    "SENSOR-ACTUATOR-SW-COMPONENT-TYPE",
    "SERVICE-SW-COMPONENT-TYPE",
    "COMPLEX-DEVICE-DRIVER-SW-COMPONENT-TYPE",
    "ECU-ABSTRACTION-SW-COMPONENT-TYPE",
    "NV-BLOCK-SW-COMPONENT-TYPE",
    "PARAMETER-SW-COMPONENT-TYPE",
    "SERVICE-PROXY-SW-COMPONENT-TYPE",
})

INTERFACE_TAGS = frozenset({
    "SENDER-RECEIVER-INTERFACE",
    "CLIENT-SERVER-INTERFACE",
    "MODE-SWITCH-INTERFACE",
    "PARAMETER-INTERFACE",
    "NV-DATA-INTERFACE",
    "TRIGGER-INTERFACE",
})

# Containers of named interface members
INTERFACE_MEMBER_CONTAINERS = frozenset({
    "DATA-ELEMENTS",
    "OPERATIONS",
    "MODE-GROUP",
    "PARAMETERS",
    "NV-DATAS",
    "TRIGGERS",
})

DATA_TYPE_TAGS = frozenset({
    "APPLICATION-PRIMITIVE-DATA-TYPE",
    "APPLICATION-RECORD-DATA-TYPE",
    "APPLICATION-ARRAY-DATA-TYPE",
    "IMPLEMENTATION-DATA-TYPE",
    "SW-BASE-TYPE",
})

# Component children
PORTS = "PORTS"
INTERNAL_BEHAVIORS = "INTERNAL-BEHAVIORS"
COMPONENTS = "COMPONENTS"
CONNECTORS = "CONNECTORS"

# Port tag -> (direction, interface reference tag)
PORT_TAGS: dict[str, tuple[PortDirection, str]] = {
    "P-PORT-PROTOTYPE": (PortDirection.PROVIDED, "PROVIDED-INTERFACE-TREF"),
    "R-PORT-PROTOTYPE": (PortDirection.REQUIRED, "REQUIRED-INTERFACE-TREF"),
}

SW_COMPONENT_PROTOTYPE = "SW-COMPONENT-PROTOTYPE"
TYPE_TREF = "TYPE-TREF"

ASSEMBLY_CONNECTOR = "ASSEMBLY-SW-CONNECTOR"
DELEGATION_CONNECTOR = "DELEGATION-SW-CONNECTOR"
PROVIDER_IREF = "PROVIDER-IREF"
REQUESTER_IREF = "REQUESTER-IREF"
INNER_PORT_IREF = "INNER-PORT-IREF"
OUTER_PORT_REF = "OUTER-PORT-REF"
CONTEXT_COMPONENT_REF = "CONTEXT-COMPONENT-REF"
TARGET_P_PORT_REF = "TARGET-P-PORT-REF"
TARGET_R_PORT_REF = "TARGET-R-PORT-REF"

# Internal behavior
BEHAVIOR_TAGS = frozenset({"SWC-INTERNAL-BEHAVIOR"})
EVENTS = "EVENTS"
RUNNABLES = "RUNNABLES"
RUNNABLE_ENTITY = "RUNNABLE-ENTITY"
START_ON_EVENT_REF = "START-ON-EVENT-REF"

EVENT_TAGS = frozenset({
    "TIMING-EVENT",
    "INIT-EVENT",
    "BACKGROUND-EVENT",
    "OPERATION-INVOKED-EVENT",
    "DATA-RECEIVED-EVENT",
    "DATA-RECEIVE-ERROR-EVENT",
    "DATA-SEND-COMPLETED-EVENT",
    "DATA-WRITE-COMPLETED-EVENT",
    "SWC-MODE-SWITCH-EVENT",
    "MODE-SWITCHED-ACK-EVENT",
    "SWC-MODE-MANAGER-ERROR-EVENT",
    "ASYNCHRONOUS-SERVER-CALL-RETURNS-EVENT",
    "EXTERNAL-TRIGGER-OCCURRED-EVENT",
    "INTERNAL-TRIGGER-OCCURRED-EVENT",
    "OS-TASK-EXECUTION-EVENT",
    "TRANSFORMER-ERROR-EVENT",
})

# Runnable access point containers -> access kind
ACCESS_CONTAINERS: dict[str, AccessKind] = {
    "DATA-SEND-POINTS": AccessKind.SEND,
    "DATA-RECEIVE-POINT-BY-ARGUMENTS": AccessKind.RECEIVE,
    "DATA-RECEIVE-POINT-BY-VALUES": AccessKind.RECEIVE,
    "DATA-READ-ACCESSS": AccessKind.READ,
    "DATA-WRITE-ACCESSS": AccessKind.WRITE,
    "SERVER-CALL-POINTS": AccessKind.CALL,
    "MODE-SWITCH-POINTS": AccessKind.MODE_SWITCH,
}

# Reference tags naming the accessed port inside an access point
ACCESS_PORT_REFS = frozenset({
    "PORT-PROTOTYPE-REF",
    "CONTEXT-R-PORT-REF",
    "CONTEXT-P-PORT-REF",
    "CONTEXT-PORT-REF",
})

# Reference tags naming the accessed data element / operation
ACCESS_TARGET_REFS = frozenset({
    "TARGET-DATA-PROTOTYPE-REF",
    "TARGET-REQUIRED-OPERATION-REF",
    "TARGET-PROVIDED-OPERATION-REF",
    "TARGET-MODE-GROUP-REF",
    "TARGET-MODE-DECLARATION-GROUP-PROTOTYPE-REF",
})

# Behavior state machine
STATE_MACHINE = "STATE-MACHINE"
STATES = "STATES"
STATE = "STATE"
IS_INITIAL = "IS-INITIAL"
TRANSITIONS = "TRANSITIONS"
TRANSITION = "TRANSITION"
SOURCE_STATE_REF = "SOURCE-STATE-REF"
TARGET_STATE_REF = "TARGET-STATE-REF"
EVENT_REF = "EVENT-REF"
GUARD = "GUARD"

TRUE_VALUES = frozenset({"true", "1", "yes"})


def is_autosar(element: Element) -> bool:
    """Return True if the element belongs to an AUTOSAR schema namespace."""
    namespace = element.namespace
    return namespace is None or namespace.startswith(AUTOSAR_NAMESPACE_PREFIX)


def is_reference(element: Element) -> bool:
    """Return True for reference elements (*-REF, *-TREF) carrying a path."""
    local = element.local_name
    return (local.endswith("-REF") or local.endswith("-TREF")) and bool(element.text)
