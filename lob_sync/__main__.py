from lob_sync.runner import main

raise SystemExit(main())
