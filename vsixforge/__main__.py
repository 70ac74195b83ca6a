# vsixforge/__main__.py
from __future__ import annotations
import sys

from vsixforge.cli import main

sys.exit(main())
