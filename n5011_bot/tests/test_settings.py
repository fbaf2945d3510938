import tempfile
import unittest

from n5011_bot.core.errors import ValidationError
from n5011_bot.core.settings import GlobalSettings
from n5011_bot.tests._helpers import make_repo


class TestGlobalSettings(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.repo = make_repo(self._td.name)
        self.settings = GlobalSettings(repo=self.repo, admin_ids=(11, 22), default_interval=3600)

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_is_admin(self) -> None:
        self.assertTrue(self.settings.is_admin(11))
        self.assertTrue(self.settings.is_admin(22))
        self.assertFalse(self.settings.is_admin(33))

    def test_default_interval_stored_on_first_read(self) -> None:
        self.assertIsNone(self.repo.get_interval())
        self.assertEqual(self.settings.interval(), 3600)
        self.assertEqual(self.repo.get_interval(), 3600)

    def test_stored_interval_wins_over_default(self) -> None:
        self.repo.set_interval(seconds=45)
        self.assertEqual(self.settings.interval(), 45)

    def test_set_interval(self) -> None:
        self.settings.set_interval(0)
        self.assertEqual(self.settings.interval(), 0)
        with self.assertRaises(ValidationError):
            self.settings.set_interval(-1)
        self.assertEqual(self.settings.interval(), 0)


if __name__ == "__main__":
    unittest.main()
