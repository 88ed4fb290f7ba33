from procwarden.main import main

raise SystemExit(main())
