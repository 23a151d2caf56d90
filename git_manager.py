import logging
import os
from typing import Iterator, List, Optional

import git
import git.exc
import pathspec
from git import GitCommandError

from git_graph_errors import CheckoutFailed, RepositoryError, StageFailed, UnknownCommitId


class GitManager:
    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self.repo: Optional[git.Repo] = None
        self.ignore_spec: Optional[pathspec.PathSpec] = None

    def initialize(self) -> bool:
        """初始化 Git 仓库"""
        try:
            self.repo = git.Repo(self.repo_path)
            self._load_gitignore_patterns()
            return True
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            return False

    def _require_repo(self) -> git.Repo:
        if not self.repo:
            raise RepositoryError("Repository not initialized.")
        return self.repo

    def iter_references(self) -> Iterator[tuple[str, git.Commit]]:
        """按 本地分支、远程分支、标签 的顺序返回 (引用全名, 提交)

        The full name (e.g. 'refs/heads/main') is returned so the label can be
        derived from it. Tags that do not point at a commit are skipped.
        """
        repo = self._require_repo()
        refs: list = list(repo.heads)
        for remote in repo.remotes:
            refs.extend(remote.refs)
        refs.extend(repo.tags)

        for ref in refs:
            try:
                commit = ref.commit
            except ValueError:
                logging.warning("Skipping reference %s: it does not point at a commit", ref.path)
                continue
            yield ref.path, commit

    def get_commit(self, rev: str) -> git.Commit:
        """将引用名或提交 id 解析为提交对象"""
        repo = self._require_repo()
        try:
            return repo.commit(rev)
        except (git.exc.BadName, git.exc.BadObject, ValueError) as e:
            raise UnknownCommitId(rev) from e

    def get_parents(self, commit_id: str) -> List[str]:
        """获取提交的父提交（保持 git 报告的顺序）"""
        return [parent.hexsha for parent in self.get_commit(commit_id).parents]

    def get_branches(self) -> List[str]:
        """获取所有本地分支"""
        if not self.repo:
            return []
        return [branch.name for branch in self.repo.branches]

    def is_branch_tip(self, branch_name: str, commit_id: str) -> bool:
        """本地分支 branch_name 是否存在且指向 commit_id"""
        if not self.repo or branch_name not in self.repo.heads:
            return False
        try:
            return self.repo.heads[branch_name].commit.hexsha == commit_id
        except ValueError:
            logging.warning("Branch %s does not point to a commit", branch_name)
            return False

    def get_remotes(self) -> List[str]:
        """获取所有远程仓库名称"""
        if not self.repo:
            return []
        return [remote.name for remote in self.repo.remotes]

    def get_changed_files(self) -> List[str]:
        """获取工作区中已修改和未跟踪的文件（忽略 .gitignore 匹配的路径）"""
        if not self.repo:
            return []

        try:
            changed = set(self.repo.untracked_files)
            for diff_item in self.repo.index.diff(None):
                # For deletions b_path is None
                changed.add(diff_item.a_path or diff_item.b_path)
        except GitCommandError as e:
            logging.error("Git command error while listing changed files: %s", e)
            return []

        return sorted(path for path in changed if path and not self.is_ignored(path))

    def checkout(self, rev: str):
        """检出指定的提交或分支，失败时抛出 CheckoutFailed"""
        repo = self._require_repo()
        try:
            repo.git.checkout(rev)
            logging.info("Checked out %s", rev)
        except GitCommandError as e:
            logging.error("检出 %s 失败：%s", rev, e)
            raise CheckoutFailed(rev, e.stderr.strip() if e.stderr else str(e)) from e

    def stage_file(self, file_path: str):
        """暂存文件，失败时抛出 StageFailed"""
        repo = self._require_repo()
        if self.is_ignored(file_path):
            raise StageFailed(file_path, "path is ignored by .gitignore")
        try:
            repo.git.add("--", file_path)
            logging.info("Staged %s", file_path)
        except GitCommandError as e:
            logging.error("暂存 %s 失败：%s", file_path, e)
            raise StageFailed(file_path, e.stderr.strip() if e.stderr else str(e)) from e

    def _load_gitignore_patterns(self):
        """加载.gitignore 文件中的忽略规则"""
        if not self.repo:
            return

        gitignore_path = os.path.join(self.repo_path, ".gitignore")
        if not os.path.exists(gitignore_path):
            self.ignore_spec = None
            return

        with open(gitignore_path, "r", encoding="utf-8") as f:
            patterns = f.readlines()

        self.ignore_spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns)

    def is_ignored(self, path: str) -> bool:
        """检查路径是否被.gitignore 忽略"""
        if not self.ignore_spec:
            return False

        try:
            # 获取相对于仓库根目录的路径
            if os.path.isabs(path):
                path = os.path.relpath(path, self.repo_path)
            # 统一使用正斜杠
            rel_path = path.replace(os.sep, "/")
            return self.ignore_spec.match_file(rel_path)
        except ValueError:
            return False
