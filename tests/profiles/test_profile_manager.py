import tempfile
import unittest
from pathlib import Path

from dockshift.core.errors import EmptyDockSnapshot, ValidationError
from dockshift.core.models import ApplyResult, DockEntry, EntryKind
from dockshift.profiles.manager import ProfileManager, make_entry
from dockshift.profiles.models import Profile
from dockshift.profiles.store import ProfileStore
from dockshift.testing import FakeDockRunner, FakeRow, build_fake_engine


ROWS = [
    FakeRow("Safari", "file:///Applications/Safari.app/"),
    FakeRow("Mail", "file:///System/Applications/Mail.app/"),
]


class TestProfileManager(unittest.TestCase):
    def _manager(self, td: str, runner: FakeDockRunner) -> ProfileManager:
        return ProfileManager(build_fake_engine(runner), ProfileStore(Path(td)))

    def test_default_profile_captures_dock_and_becomes_current(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            mgr = self._manager(td, FakeDockRunner(ROWS))
            profile = mgr.create_default_profile()

            self.assertTrue(profile.is_default)
            self.assertEqual([e.name for e in profile.items], ["Safari", "Mail"])
            self.assertEqual(mgr.current().name, "Default")

    def test_default_profile_rejects_empty_dock(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            mgr = self._manager(td, FakeDockRunner())
            with self.assertRaises(EmptyDockSnapshot):
                mgr.create_default_profile()
            self.assertEqual(ProfileStore(Path(td)).list(), [])

    def test_capture_refuses_to_overwrite_without_flag(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            runner = FakeDockRunner(ROWS)
            mgr = self._manager(td, runner)
            mgr.capture_profile("Work")
            with self.assertRaises(ValidationError) as ctx:
                mgr.capture_profile("Work")
            self.assertEqual(ctx.exception.code, "profile.exists")

            runner.rows.pop()
            replaced = mgr.capture_profile("Work", overwrite=True)
            self.assertEqual(len(replaced.items), 1)

    def test_refresh_keeps_metadata(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            runner = FakeDockRunner(ROWS)
            store = ProfileStore(Path(td))
            store.save(Profile(name="Home", sort_order=3, created_at="2025-01-01T00:00:00Z"))
            mgr = ProfileManager(build_fake_engine(runner), store)

            refreshed = mgr.refresh_profile("Home")

            self.assertEqual(len(refreshed.items), 2)
            self.assertEqual(refreshed.sort_order, 3)
            self.assertEqual(store.load("Home").created_at, "2025-01-01T00:00:00Z")

    def test_apply_sets_current_and_dry_run_does_not(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            runner = FakeDockRunner(ROWS)
            store = ProfileStore(Path(td))
            store.save(Profile(name="Minimal", items=(DockEntry(EntryKind.APP, "Notes", "/Applications/Notes.app"),)))
            mgr = ProfileManager(build_fake_engine(runner), store)

            plan = mgr.apply("Minimal", dry_run=True)
            self.assertIsInstance(plan, list)
            self.assertIsNone(store.current_profile())
            self.assertEqual(len(runner.rows), 2)

            result = mgr.apply("Minimal")
            self.assertIsInstance(result, ApplyResult)
            self.assertEqual(result.verified_count, 1)
            self.assertEqual(store.current_profile(), "Minimal")
            self.assertEqual([r.name for r in runner.rows], ["Notes"])


SAFARI = DockEntry(EntryKind.APP, "Safari", "/Applications/Safari.app")
MAIL = DockEntry(EntryKind.APP, "Mail", "/Applications/Mail.app")
NOTES = DockEntry(EntryKind.APP, "Notes", "/Applications/Notes.app")


class TestProfileEditing(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.store = ProfileStore(Path(self._td.name))
        self.store.save(Profile(name="Work", items=(SAFARI, MAIL), sort_order=0))
        self.mgr = ProfileManager(build_fake_engine(FakeDockRunner()), self.store)

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_add_items_appends_or_inserts(self) -> None:
        self.mgr.add_items("Work", [NOTES])
        self.assertEqual(self.store.load("Work").items, (SAFARI, MAIL, NOTES))

        site = make_entry("https://example.com/docs", name="Docs")
        self.mgr.add_items("Work", [site], position=0)
        self.assertEqual(self.store.load("Work").items, (site, SAFARI, MAIL, NOTES))

    def test_add_spacer_and_remove(self) -> None:
        updated = self.mgr.add_spacer("Work", position=1)
        self.assertIs(updated.items[1].kind, EntryKind.SPACER)

        updated = self.mgr.remove_item("Work", 1)
        self.assertEqual(updated.items, (SAFARI, MAIL))
        self.assertEqual(self.store.load("Work").items, (SAFARI, MAIL))

    def test_move_item(self) -> None:
        self.mgr.add_items("Work", [NOTES])
        self.assertEqual(self.mgr.move_item("Work", 2, 0).items, (NOTES, SAFARI, MAIL))
        self.assertEqual(self.mgr.move_item("Work", 0, 2).items, (SAFARI, MAIL, NOTES))

    def test_bad_index_leaves_profile_untouched(self) -> None:
        for call in (
            lambda: self.mgr.remove_item("Work", 2),
            lambda: self.mgr.move_item("Work", 0, 5),
            lambda: self.mgr.add_items("Work", [NOTES], position=3),
            lambda: self.mgr.remove_item("Work", -1),
        ):
            with self.assertRaises(ValidationError) as ctx:
                call()
            self.assertEqual(ctx.exception.code, "profile.bad_index")
        self.assertEqual(self.store.load("Work").items, (SAFARI, MAIL))

    def test_duplicate_names_copies_after_existing(self) -> None:
        first = self.mgr.duplicate_profile("Work")
        second = self.mgr.duplicate_profile("Work")

        self.assertEqual(first.name, "Work Copy")
        self.assertEqual(second.name, "Work Copy 2")
        self.assertEqual(first.items, (SAFARI, MAIL))
        self.assertFalse(first.is_default)
        self.assertEqual([p.name for p in self.store.list()], ["Work", "Work Copy", "Work Copy 2"])

        with self.assertRaises(ValidationError):
            self.mgr.duplicate_profile("Work", "work copy")

    def test_rename_keeps_current_pointer(self) -> None:
        self.store.set_current_profile("Work")
        self.mgr.rename_profile("Work", "Office")
        self.assertEqual(self.mgr.current().name, "Office")


class TestMakeEntry(unittest.TestCase):
    def test_kind_and_name_are_inferred(self) -> None:
        app = make_entry("/Applications/Safari.app/")
        self.assertEqual((app.kind, app.name, app.target), (EntryKind.APP, "Safari", "/Applications/Safari.app"))

        folder = make_entry("/Users/me/Downloads", section="others")
        self.assertEqual((folder.kind, folder.name, folder.section), (EntryKind.FOLDER, "Downloads", "others"))

        url = make_entry("https://example.com")
        self.assertEqual((url.kind, url.name), (EntryKind.URL, "https://example.com"))

    def test_relative_paths_become_absolute(self) -> None:
        e = make_entry("Tools", kind="folder")
        self.assertTrue(Path(e.target).is_absolute())
        self.assertEqual(e.name, "Tools")


if __name__ == "__main__":
    unittest.main()
