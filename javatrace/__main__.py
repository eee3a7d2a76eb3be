"""Entry point for ``python -m javatrace``."""

from .main import main

raise SystemExit(main())
