import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from git_graph_window import GitGraphWindow
from settings import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"


def configure_logging():
    # 根据环境变量设置日志级别
    log_level = logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    # add file handler
    if os.getenv("LOG_TO_FILE") == "1":
        file_handler = logging.FileHandler("commit-graph.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


def main():
    app = QApplication(sys.argv)

    window = GitGraphWindow()
    window.show()

    # 命令行参数优先，其次是上次打开的仓库，最后是当前目录
    explicit = len(sys.argv) > 1
    repo_path = sys.argv[1] if explicit else settings.get_last_repository() or os.getcwd()
    if not window.open_repository(repo_path, show_errors=explicit):
        logging.info("No repository opened at %s", repo_path)

    window.activateWindow()
    window.raise_()

    sys.exit(app.exec())


def run():
    configure_logging()
    main()


if __name__ == "__main__":
    run()
