"""Main TUI application with global exception handling."""

import logging
from typing import Optional

from textual.app import App

from navlib.config import ConfigError, load_config
from navlib.host import PanelHost
from navlib.sandbox import load_scenario

from .screens.buildings_screen import BuildingsScreen
from .screens.panel_screen import PanelScreen
from .widgets.speech_log import SpeechLog


logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "/tmp/panelnav_debug.log"


class PanelNavApp(App):
    """Main TUI application for exploring building panels."""

    TITLE = "panelnav TUI"
    SUB_TITLE = "Building Panel Explorer"

    CSS = """
    Screen {
        layout: vertical;
    }

    Header {
        dock: top;
    }

    Footer {
        dock: bottom;
    }
    """

    def __init__(self, scenario_name: Optional[str] = None):
        super().__init__()
        self.scenario_name = scenario_name
        self.config = None
        self.state = None

    def on_mount(self) -> None:
        """Load config and scenario, then show the buildings list."""
        try:
            self.config = load_config()
            name = self.scenario_name or self.config.default_scenario
            if not name and len(self.config.scenarios) == 1:
                name = next(iter(self.config.scenarios))
            scenario = self.config.scenarios.get(name) if name else None
            if scenario is None:
                raise ConfigError(f"Scenario not found: {name}")
            self.state = load_scenario(scenario.path)
            self.sub_title = f"Building Panel Explorer - {scenario.name}"
            logger.info("TUI app initialized with scenario %s", scenario.name)

            self.push_screen(BuildingsScreen())

        except Exception as e:
            self.show_error_dialog(
                title="Configuration Error",
                message=f"Failed to load configuration: {e}"
            )

    async def on_exception(self, exception: Exception) -> None:
        """Global exception handler - never crash."""
        self.show_error_dialog(
            title="Unexpected Error",
            message=f"An error occurred: {str(exception)}"
        )
        logger.error(f"TUI exception: {exception}", exc_info=True)

    def show_error_dialog(self, title: str, message: str, details: Optional[str] = None) -> None:
        """Ring the bell and log; the panel explorer has no modal dialogs."""
        self.bell()
        self.sub_title = f"{title}: {message}"
        logger.error(f"{title}: {message}")
        if details:
            logger.error(f"Details: {details}")

    def make_host(self, speech_log: SpeechLog) -> PanelHost:
        """Build a host whose speech and cues land in the panel's log."""
        speech_log.echo_cues = self.config.speech.echo_cues
        return PanelHost(self.state, speech_log, speech_log, self.config.navigation)

    def on_buildings_screen_building_selected(self, message: BuildingsScreen.BuildingSelected) -> None:
        """Open the panel of the selected building."""
        building = message.building
        logger.info(f"Opening panel for {building}")
        self.push_screen(PanelScreen(self.make_host, building))

    def on_buildings_screen_leave(self, message: BuildingsScreen.Leave) -> None:
        """Escape on the buildings list quits."""
        logger.info("Leaving buildings list")
        self.exit()

    def on_panel_screen_closed(self, message: PanelScreen.Closed) -> None:
        logger.info(f"Panel closed: {message.building}")
        self.pop_screen()


def run_tui(scenario_name: Optional[str] = None) -> None:
    """Entry point for running the TUI."""
    # Configure logging to file only for debugging
    log_file = DEFAULT_LOG_FILE
    try:
        log_file = load_config().speech.log_file or DEFAULT_LOG_FILE
    except ConfigError:
        pass  # the app reports config problems once it is running

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode='w')
        ]
    )

    logger.info(f"Starting TUI, debug log at: {log_file}")

    app = PanelNavApp(scenario_name=scenario_name)
    app.run()
