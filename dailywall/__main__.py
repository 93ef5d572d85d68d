"""
__main__.py

Run dailywall as a python module instead of invoking the "dailywall" command line entrypoint:

    $ python -m dailywall sync
"""


from dailywall.cli import main


if __name__ == "__main__":
    main()
