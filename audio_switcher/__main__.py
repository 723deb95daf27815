from audio_switcher.main import main

raise SystemExit(main())
