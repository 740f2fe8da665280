from flights_cli.cli import main

raise SystemExit(main())
