from docsbuild.cli import main

raise SystemExit(main())
