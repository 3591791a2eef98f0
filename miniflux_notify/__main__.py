from miniflux_notify.main import main

raise SystemExit(main())
