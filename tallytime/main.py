import flet as ft
import logging

from config import LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from app import create_app


async def main(page: ft.Page) -> None:
    create_app(page)


def run() -> None:
    ft.run(main)


if __name__ == "__main__":
    run()
