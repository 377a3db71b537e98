from reddit_status_checker.main import main

raise SystemExit(main())
