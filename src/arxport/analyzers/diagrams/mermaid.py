"""Mermaid encoding of sequence and state diagrams.

Only the textual diagram source is produced; layout and rendering are left
to whatever Mermaid renderer displays the export.
"""

import logging

from arxport.models.arxml import ShortNamePath
from arxport.models.diagrams import MermaidDiagram, SequenceDiagram, StateDiagram

logger = logging.getLogger(__name__)

ARROW = "->>"


class MermaidGenerator:
    """Generates Mermaid text from sequence and state diagrams.

    Node ids are derived from short names and made unique, so the same
    diagram always encodes to the same text.
    """

    def sequence_diagram(self, diagram: SequenceDiagram) -> MermaidDiagram:
        """Encode a sequence diagram as `sequenceDiagram`.

        Args:
            diagram: Sequence diagram

        Returns:
            MermaidDiagram with one message line per interaction
        """
        lines = ["sequenceDiagram", f"    %% {diagram.title}"]

        participants = diagram.participants
        ids = self._assign_ids(participants)
        labels = self._participant_labels(participants)

        for participant in participants:
            node_id = ids[participant]
            label = labels[participant]
            if label == node_id:
                lines.append(f"    participant {node_id}")
            else:
                lines.append(f"    participant {node_id} as {label}")

        for step in diagram.interactions:
            lines.append(
                f"    {ids[step.caller]}{ARROW}{ids[step.callee]}: "
                f"{self._escape_label(step.operation)}"
            )

        logger.debug(
            "Encoded %d participants, %d messages",
            len(participants),
            len(diagram.interactions),
        )
        return MermaidDiagram(
            mermaid="\n".join(lines),
            node_count=len(participants),
            title=diagram.title,
        )

    def state_diagram(self, diagram: StateDiagram) -> MermaidDiagram:
        """Encode a state diagram as `stateDiagram-v2`.

        Args:
            diagram: State diagram

        Returns:
            MermaidDiagram with the initial marker, one line per transition
            and a note on every unreachable state
        """
        title = f"{diagram.component.name}: {diagram.name}"
        lines = ["stateDiagram-v2", f"    %% {title}"]

        ids: dict[str, str] = {}
        used: set[str] = set()
        for index, state in enumerate(diagram.states):
            node_id = self._sanitize_node_id(state.name, index)
            if node_id in used:
                node_id = f"{node_id}_{index}"
            used.add(node_id)
            ids[state.name] = node_id

            label = self._get_display_name(state.name)
            if label != node_id:
                lines.append(f'    state "{label}" as {node_id}')

        initial = diagram.initial
        if initial is not None:
            lines.append(f"    [*] --> {ids[initial.name]}")

        for transition in diagram.transitions:
            line = f"    {ids[transition.source]} --> {ids[transition.target]}"
            label = self._transition_label(transition.event, transition.guard)
            if label:
                line += f": {label}"
            lines.append(line)

        for state in diagram.unreachable_states:
            lines.append(f"    note right of {ids[state.name]}: unreachable")

        logger.debug(
            "Encoded %d states, %d transitions",
            len(diagram.states),
            len(diagram.transitions),
        )
        return MermaidDiagram(
            mermaid="\n".join(lines),
            node_count=len(diagram.states),
            title=title,
        )

    def _assign_ids(self, participants: tuple[ShortNamePath, ...]) -> dict[ShortNamePath, str]:
        ids: dict[ShortNamePath, str] = {}
        used: set[str] = set()
        for index, path in enumerate(participants):
            node_id = self._sanitize_node_id(path.name, index)
            if node_id in used:
                node_id = self._sanitize_node_id(str(path).strip("/"), index)
            if node_id in used:
                node_id = f"{node_id}_{index}"
            used.add(node_id)
            ids[path] = node_id
        return ids

    def _participant_labels(
        self,
        participants: tuple[ShortNamePath, ...],
    ) -> dict[ShortNamePath, str]:
        """Short name, or the full path where two participants share a name."""
        names = [path.name for path in participants]
        return {
            path: self._get_display_name(
                path.name if names.count(path.name) == 1 else str(path)
            )
            for path in participants
        }

    def _transition_label(self, event: str | None, guard: str | None) -> str:
        parts = []
        if event:
            parts.append(self._escape_label(event))
        if guard:
            parts.append(f"[{self._escape_label(guard)}]")
        return " ".join(parts)

    def _sanitize_node_id(self, node: str, index: int) -> str:
        """Create a valid Mermaid node ID from a name.

        Args:
            node: Short name or path
            index: Unique index for disambiguation

        Returns:
            Valid Mermaid node ID
        """
        sanitized = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in node)
        # Ensure it starts with a letter
        if sanitized and not sanitized[0].isalpha():
            sanitized = f"n{index}_{sanitized}"
        # "end" terminates blocks in Mermaid
        if sanitized.lower() == "end":
            sanitized = f"{sanitized}_{index}"
        return sanitized or f"n{index}"

    def _get_display_name(self, node: str) -> str:
        """Get a display-friendly name (never empty)."""
        name = node.strip()
        name = name.replace('"', "'").replace(";", ",").replace("#", "")
        return name if name else "unnamed"

    def _escape_label(self, text: str) -> str:
        """Flatten a message / transition label onto one safe line."""
        text = text.replace(";", ",").replace("#", "").replace(":", " ")
        return " ".join(text.split())


def sequence_to_mermaid(diagram: SequenceDiagram) -> MermaidDiagram:
    """Encode a sequence diagram.

    Convenience function for Mermaid encoding.
    """
    return MermaidGenerator().sequence_diagram(diagram)


def state_to_mermaid(diagram: StateDiagram) -> MermaidDiagram:
    """Encode a state diagram.

    Convenience function for Mermaid encoding.
    """
    return MermaidGenerator().state_diagram(diagram)
