"""Simple launcher entrypoint for packaging and installers.

This module provides a `main()` function that opens the Tkinter GUI.
Used as a stable entry-point for PyInstaller and `pyproject` scripts.
"""
import gui_tk


def main():
    app = gui_tk.build_ui()
    app.mainloop()


if __name__ == '__main__':
    main()
