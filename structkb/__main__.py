from structkb.cli import main

raise SystemExit(main())
