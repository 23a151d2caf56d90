import json
import logging
import os
from pathlib import Path
from typing import Optional


class Settings:
    def __init__(self, config_dir: Optional[str] = None):
        # 配置目录，默认位于用户主目录
        if config_dir is None:
            config_dir = os.path.join(str(Path.home()), ".commit_graph")
        self.config_dir = config_dir
        if not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir)

        # 配置文件路径
        self.config_file = os.path.join(self.config_dir, "settings.json")

        # 默认设置
        self.settings = {
            "recent_repositories": [],  # 最近打开的仓库列表
            "last_repository": None,  # 上次打开的仓库
            "max_recent": 10,  # 最大记录数
            "zoom_min": 0.1,
            "zoom_max": 5.0,
            "zoom_step": 0.15,  # 每滚动一行缩放的比例
            "window_size": [1200, 800],
        }

        # 加载已有设置
        self.load_settings()

    def load_settings(self):
        """加载设置"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r", encoding="utf-8") as f:
                    saved_settings = json.load(f)
                    self.settings.update(saved_settings)
        except (OSError, ValueError) as e:
            logging.warning("加载设置失败：%s", e)

    def save_settings(self):
        """保存设置"""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.warning("保存设置失败：%s", e)

    def add_recent_repository(self, repo_path: str):
        """添加最近打开的仓库"""
        self.settings["last_repository"] = repo_path

        recent = self.settings["recent_repositories"]

        # 如果已经在列表中，先移除
        if repo_path in recent:
            recent.remove(repo_path)

        # 添加到列表开头
        recent.insert(0, repo_path)

        # 保持列表在最大长度以内
        self.settings["recent_repositories"] = recent[: self.settings["max_recent"]]

        self.save_settings()

    def get_recent_repositories(self) -> list[str]:
        """获取最近仓库列表"""
        return self.settings["recent_repositories"]

    def get_last_repository(self) -> Optional[str]:
        """获取上次打开的仓库"""
        return self.settings["last_repository"]

    def get_zoom_range(self) -> tuple[float, float]:
        """获取缩放范围 (最小, 最大)"""
        zoom_min = float(self.settings.get("zoom_min", 0.1))
        zoom_max = float(self.settings.get("zoom_max", 5.0))
        if not 0 < zoom_min <= zoom_max:
            logging.warning("无效的缩放范围 [%s, %s]，使用默认值", zoom_min, zoom_max)
            return 0.1, 5.0
        return zoom_min, zoom_max

    def get_zoom_step(self) -> float:
        return float(self.settings.get("zoom_step", 0.15))

    def get_window_size(self) -> tuple[int, int]:
        width, height = self.settings.get("window_size", [1200, 800])
        return int(width), int(height)

    def save_window_size(self, width: int, height: int):
        """保存窗口大小"""
        self.settings["window_size"] = [width, height]
        self.save_settings()


# 创建全局settings实例
settings = Settings()
