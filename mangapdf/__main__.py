from .cli import run_main

raise SystemExit(run_main())
