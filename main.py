import sys

from pricesnap.app import main

if __name__ == '__main__':
    # The Qt event loop runs until the window is closed; its exit code
    # becomes the process exit code.
    sys.exit(main())
