"""
reset_data.py
-------------
Clear all stored data (vehicles, rentals) from the store file.

Usage:
    $ python reset_data.py

Repopulate demo data afterwards with:
    $ python seeds.py
"""

from carhire import create_app


def main():
    app = create_app()
    app.extensions["carhire"].store.clear()
    print(f"{app.config['DATA_PATH']} has been cleared.")


if __name__ == "__main__":
    main()
