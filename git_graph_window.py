import logging
import os
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from git_graph_builder import build_graph
from git_graph_errors import GraphError, RepositoryError
from git_graph_layout import LayoutEngine
from git_graph_view import GitGraphView
from git_graph_viewport import ViewportController
from git_manager import GitManager
from settings import settings


class GitGraphWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(self.tr("Commit Graph"))
        self.resize(*settings.get_window_size())

        self.git_manager: Optional[GitManager] = None
        self.settings = settings
        self.layout_engine = LayoutEngine()

        zoom_min, zoom_max = settings.get_zoom_range()
        controller = ViewportController(zoom_min=zoom_min, zoom_max=zoom_max, zoom_step=settings.get_zoom_step())
        self.graph_view = GitGraphView(controller, self)
        self.graph_view.commit_selected.connect(self.on_commit_selected)
        self.graph_view.commit_unselected.connect(self.on_commit_unselected)
        self.graph_view.checkout_requested.connect(self.on_checkout_requested)

        # 侧边面板：远程仓库和变更文件
        side_panel = QWidget()
        side_layout = QVBoxLayout(side_panel)
        side_layout.setContentsMargins(6, 6, 6, 6)

        self.remotes_list = QListWidget()
        side_layout.addLayout(self._section_header(self.tr("Remotes"), self.refresh_remotes))
        side_layout.addWidget(self.remotes_list)

        self.changes_list = QListWidget()
        self.changes_list.setToolTip(self.tr("Double-click a file to stage it"))
        self.changes_list.itemDoubleClicked.connect(lambda item: self.stage_file(item.text()))
        side_layout.addLayout(self._section_header(self.tr("Changed"), self.refresh_changes))
        side_layout.addWidget(self.changes_list)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.graph_view)
        splitter.addWidget(side_panel)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        toolbar = self.addToolBar(self.tr("Repository"))
        open_action = QAction(self.tr("Open Repository..."), self)
        open_action.triggered.connect(self.open_repository_dialog)
        toolbar.addAction(open_action)
        refresh_action = QAction(self.tr("Refresh"), self)
        refresh_action.setShortcut("F5")
        refresh_action.triggered.connect(self.refresh_all)
        toolbar.addAction(refresh_action)

        self.statusBar().showMessage(self.tr("No repository"))

    def _section_header(self, title: str, on_refresh) -> QHBoxLayout:
        header = QHBoxLayout()
        label = QLabel(title)
        font = label.font()
        font.setPointSize(font.pointSize() + 4)
        label.setFont(font)
        refresh_button = QPushButton(self.tr("Refresh"))
        refresh_button.clicked.connect(on_refresh)
        header.addWidget(label)
        header.addStretch()
        header.addWidget(refresh_button)
        return header

    def open_repository_dialog(self):
        start_dir = self.settings.get_last_repository() or os.getcwd()
        repo_path = QFileDialog.getExistingDirectory(self, self.tr("Open Repository"), start_dir)
        if repo_path:
            self.open_repository(repo_path)

    def open_repository(self, repo_path: str, show_errors: bool = True) -> bool:
        git_manager = GitManager(repo_path)
        if not git_manager.initialize():
            logging.warning("Not a git repository: %s", repo_path)
            if show_errors:
                QMessageBox.warning(self, self.tr("Error"), self.tr("Not a git repository: ") + repo_path)
            return False

        self.git_manager = git_manager
        self.settings.add_recent_repository(repo_path)
        self.setWindowTitle(f"{self.tr('Commit Graph')} - {os.path.basename(os.path.abspath(repo_path))}")
        self.refresh_all()
        return True

    def refresh_all(self):
        self.refresh_graph()
        self.refresh_remotes()
        self.refresh_changes()

    def refresh_graph(self, reset_view: bool = True):
        if not self.git_manager:
            self.graph_view.clear_graph()
            return
        try:
            graph = build_graph(self.git_manager)
            layout = self.layout_engine.layout(graph)
        except GraphError as e:
            logging.exception("Failed to build commit graph")
            self.graph_view.clear_graph()
            QMessageBox.warning(self, self.tr("Error"), str(e))
            return
        self.graph_view.set_graph(graph, layout, reset_view=reset_view)
        self.statusBar().showMessage(self.tr("Commits: ") + str(len(graph)))

    def refresh_remotes(self):
        self.remotes_list.clear()
        if self.git_manager:
            self.remotes_list.addItems(self.git_manager.get_remotes())

    def refresh_changes(self):
        self.changes_list.clear()
        if self.git_manager:
            self.changes_list.addItems(self.git_manager.get_changed_files())

    def stage_file(self, file_path: str):
        if not self.git_manager:
            return
        try:
            self.git_manager.stage_file(file_path)
        except RepositoryError as e:
            QMessageBox.warning(self, self.tr("Stage failed"), str(e))
            return
        self.refresh_changes()

    def on_commit_selected(self, sha: str):
        graph = self.graph_view.controller.graph
        node = graph.get(sha) if graph is not None else None
        if node is None:
            return
        message = sha[:7]
        if node.label:
            message += f" ({node.label})"
        if node.summary:
            message += f"  {node.summary}"
        self.statusBar().showMessage(message)

    def on_commit_unselected(self):
        graph = self.graph_view.controller.graph
        count = len(graph) if graph is not None else 0
        self.statusBar().showMessage(self.tr("Commits: ") + str(count))

    def on_checkout_requested(self, sha: str):
        if not self.git_manager:
            return
        graph = self.graph_view.controller.graph
        node = graph.get(sha) if graph is not None else None
        # Check out the branch only when its tip is this commit, otherwise detach
        target = sha
        if node is not None and node.label and self.git_manager.is_branch_tip(node.label, sha):
            target = node.label

        try:
            self.git_manager.checkout(target)
        except RepositoryError as e:
            QMessageBox.warning(self, self.tr("Checkout failed"), str(e))
            return
        self.statusBar().showMessage(self.tr("Checked out ") + target)
        self.refresh_graph(reset_view=False)
        self.refresh_changes()

    def closeEvent(self, event):
        self.settings.save_window_size(self.width(), self.height())
        super().closeEvent(event)
