"""A collection of sequences with global transport and item pickers."""

from __future__ import annotations

from typing import Iterator, Union

from seqtimeline.sequence import Sequence, SequenceListener
from seqtimeline.timing import Cue

# Menu item ids encode the sequence index in the thousands.
_ID_BLOCK = 1000

MenuItems = list[tuple[int, str]]
CueMenu = Union[MenuItems, list[tuple[str, MenuItems]]]


class SequenceManager(SequenceListener):
    """Owns sequences, plays or stops them together and tracks playback."""

    def __init__(self) -> None:
        self.items: list[Sequence] = []
        self.only_one_sequence_playing = False
        self.is_one_sequence_playing = False
        self.is_clearing = False

    def __iter__(self) -> Iterator[Sequence]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def add_item(self, sequence: Sequence | None = None) -> Sequence:
        """Add a sequence (a new one when none is given) and return it."""
        if sequence is None:
            sequence = Sequence()
        self.items.append(sequence)
        sequence.add_listener(self)
        return sequence

    def remove_item(self, sequence: Sequence) -> None:
        """Remove a sequence; raises ValueError if it is not managed here."""
        self.items.remove(sequence)
        sequence.remove_listener(self)

    def play_all(self) -> None:
        """Start every sequence."""
        for sequence in list(self.items):
            sequence.play()

    def stop_all(self) -> None:
        """Stop every sequence and rewind it."""
        for sequence in list(self.items):
            sequence.stop()

    def sequence_play_state_changed(self, sequence: Sequence) -> None:
        if self.is_clearing:
            return
        if sequence.is_playing and self.only_one_sequence_playing:
            for other in list(self.items):
                if other is not sequence:
                    other.stop()
        self.is_one_sequence_playing = any(s.is_playing for s in self.items)

    def sequence_menu(self) -> MenuItems:
        """Entries ``(item_id, name)`` for picking a sequence."""
        return [(index, s.name) for index, s in enumerate(self.items, start=1)]

    def get_sequence_for_item_id(self, item_id: int) -> Sequence | None:
        """The sequence picked by a menu id, or None."""
        if item_id <= 0 or item_id > len(self.items):
            return None
        return self.items[item_id - 1]

    def _cue_items(self, sequence: Sequence) -> MenuItems:
        base = self.items.index(sequence) * _ID_BLOCK
        return [(base + j + 1, cue.name) for j, cue in enumerate(sequence.cues)]

    def cue_menu(self, start_from: Sequence | None = None) -> CueMenu:
        """Entries for picking a cue.

        Starting from a managed sequence gives its ``(item_id, name)`` entries;
        otherwise one ``(sequence name, entries)`` sub-menu per sequence.
        """
        if isinstance(start_from, Sequence):
            return self._cue_items(start_from)
        return [(s.name, self._cue_items(s)) for s in self.items]

    def get_cue_for_item_id(self, item_id: int) -> Cue | None:
        """The cue picked by a menu id, or None."""
        if item_id <= 0:
            return None
        sequence_index, cue_index = divmod(item_id - 1, _ID_BLOCK)
        if sequence_index >= len(self.items):
            return None
        cues = self.items[sequence_index].cues
        if cue_index >= len(cues):
            return None
        return cues[cue_index]