"""Application entry point: window, main loop and command line."""

import argparse
import logging
import sys

import pygame

from . import settings
from .constants import WINDOW_WIDTH, WINDOW_HEIGHT, FPS, LANGUAGES
from .duel_ui import DuelScreen
from .network.controller import DuelSessionController
from .network.phrases import get_phrase_set
from .ui import FontManager
from .version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Guess Duel client')
    parser.add_argument('--server', help='Lobby server address for this run '
                                         '(default: the saved address)')
    parser.add_argument('--lang', choices=LANGUAGES, help='Server/UI language')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def run(server_address: str, language: str):
    """Open the window and run until it is closed."""
    phrases = get_phrase_set(language)

    pygame.init()
    screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
    pygame.display.set_caption(phrases.labels['title'])
    FontManager.init()
    clock = pygame.time.Clock()

    controller = DuelSessionController(phrases=phrases)
    duel_screen = DuelScreen(controller, phrases, server_address)
    logger.info(f"Guess Duel {__version__} started, lobby {server_address}, language {language}")

    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                else:
                    duel_screen.handle_event(event)

            controller.poll()
            duel_screen.draw(screen)
            pygame.display.flip()
            clock.tick(FPS)
    finally:
        controller.shutdown()
        pygame.quit()


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s [%(levelname)s] %(message)s',
    )

    server_address = args.server or settings.get_server_address()
    language = args.lang or settings.get_language()
    run(server_address, language)
    return 0


if __name__ == '__main__':
    sys.exit(main())
