"""Birthday book: a personal registry of characters and their birthdays.

Layout of the data directory:
    ~/.birthdaybook/
    ├── characters/
    │   └── 3f9a0c1b2d4e.md            # One character per file, YAML frontmatter
    ├── settings.md                    # Owner birthday and other singleton settings
    └── .versions/                     # Timestamped backups (10 per record)
"""

__version__ = "0.1.0"
