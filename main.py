from omni_mount.server import main

if __name__ == "__main__":
    main()
