from fastax.cli import main

raise SystemExit(main())
