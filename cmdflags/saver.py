"""Save and restore the state of every flag in a registry.

Typical use is in tests:

    with FlagSaver():
        set_command_line_option('port', '0')
        run_server()
    # every flag is back to what it was before the block
"""

from typing import List, Optional

from .command_line_flag import CommandLineFlag
from .registry import FlagRegistry, registry_lock


class FlagSaverImpl:
    """Holds backup copies of a registry's flags."""

    def __init__(self, main_registry: FlagRegistry):
        self._main_registry = main_registry
        self._backup_registry: List[CommandLineFlag] = []
        self._saved = False

    def save_from_registry(self) -> None:
        """Copy every flag's mutable state. May only be called once."""
        with registry_lock(self._main_registry):
            assert not self._saved, "save_from_registry() may only be called once"
            self._saved = True
            for main in self._main_registry.flags_locked():
                backup = CommandLineFlag(
                    main.name, main.help, main.filename,
                    main.current.new(), main.defvalue.new())
                backup.copy_from(main)
                self._backup_registry.append(backup)

    def restore_to_registry(self) -> None:
        """Copy the saved state back onto the live flags.

        Flags removed from the registry since the save are skipped.
        """
        with registry_lock(self._main_registry):
            for backup in self._backup_registry:
                main = self._main_registry.find_flag_locked(backup.name)
                if main is not None:
                    main.copy_from(backup)

    @property
    def backups(self) -> List[CommandLineFlag]:
        return list(self._backup_registry)


class FlagSaver:
    """Snapshot of all flags, restored on exit unless discarded.

    Saving happens at construction. Use it as a context manager, or call
    restore() yourself.
    """

    def __init__(self, registry: Optional[FlagRegistry] = None):
        if registry is None:
            registry = FlagRegistry.global_registry()
        self._impl: Optional[FlagSaverImpl] = FlagSaverImpl(registry)
        self._impl.save_from_registry()

    def discard(self) -> None:
        """Keep the current flag values; restore() becomes a no-op."""
        self._impl = None

    @property
    def discarded(self) -> bool:
        return self._impl is None

    def restore(self) -> None:
        """Put every flag back to its saved state. Only the first call does anything."""
        if self._impl is None:
            return
        self._impl.restore_to_registry()
        self._impl = None

    def __enter__(self) -> 'FlagSaver':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.restore()
