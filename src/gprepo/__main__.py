from gprepo.cli import main

raise SystemExit(main())
