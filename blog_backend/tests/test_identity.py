import re
import unittest
from unittest.mock import MagicMock

from blog_backend.identity import (
    PROFILE_IMG_NAMES,
    PROFILE_IMG_STYLES,
    default_profile_img,
    derive_blog_slug,
    derive_username,
    random_token,
)


class DeriveUsernameTests(unittest.TestCase):
    def test_unused_local_part(self):
        directory = MagicMock()
        directory.username_exists.return_value = False
        self.assertEqual(derive_username("alice@x.com", directory), "alice")
        directory.username_exists.assert_called_once_with("alice")

    def test_taken_local_part_gets_suffix(self):
        directory = MagicMock()
        directory.username_exists.return_value = True
        username = derive_username("alice@x.com", directory)
        self.assertRegex(username, r"^alice[A-Za-z0-9]{5}$")
        # No second lookup for the suffixed name.
        directory.username_exists.assert_called_once_with("alice")


class DeriveBlogSlugTests(unittest.TestCase):
    def test_punctuation_and_spaces_become_hyphens(self):
        slug = derive_blog_slug("  Hello,   World!  ")
        self.assertRegex(slug, r"^Hello-World-[A-Za-z0-9_-]{21}$")

    def test_title_without_alphanumerics(self):
        slug = derive_blog_slug("!!!")
        self.assertEqual(len(slug), 21)

    def test_slugs_differ(self):
        self.assertNotEqual(derive_blog_slug("Same"), derive_blog_slug("Same"))


class TokenAndAvatarTests(unittest.TestCase):
    def test_random_token_alphabet(self):
        token = random_token(50, "ab")
        self.assertEqual(len(token), 50)
        self.assertTrue(set(token) <= {"a", "b"})

    def test_default_profile_img(self):
        match = re.fullmatch(
            r"https://api\.dicebear\.com/6\.x/([a-z-]+)/svg\?seed=(\w+)",
            default_profile_img(),
        )
        self.assertIsNotNone(match)
        self.assertIn(match.group(1), PROFILE_IMG_STYLES)
        self.assertIn(match.group(2), PROFILE_IMG_NAMES)


if __name__ == "__main__":
    unittest.main()
