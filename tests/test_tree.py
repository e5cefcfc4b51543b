"""Tests for DirectoryTreeService browsing and lookup projections."""

from __future__ import annotations

import pytest

from workbench.core.capabilities import MemoryDirectoryHandle, open_directory
from workbench.core.models import ExplorerFilterConfig, HandleKind
from workbench.tree import DirectoryTreeService, TreeNode, should_skip


def _names(nodes) -> list[str]:
    return [node.name for node in nodes]


def _node(nodes: list[TreeNode], name: str) -> TreeNode:
    return next(node for node in nodes if node.name == name)


class TestShouldSkip:
    """Test the browsing-projection filter policy."""

    def test_plain_names_kept(self):
        """Test ordinary entries are never skipped."""
        config = ExplorerFilterConfig()

        assert should_skip("src", config) is False
        assert should_skip("README.md", config) is False

    @pytest.mark.parametrize("name", [".env", ".env.local", ".gitignore", ".eslintrc.json", ".prettierrc", ".vscode"])
    def test_important_dotfiles_always_visible(self, name):
        """Test allow-listed dotfiles (prefix match) stay visible."""
        assert should_skip(name, ExplorerFilterConfig()) is False

    def test_other_dotfiles_hidden_by_default(self):
        """Test other dotfiles are hidden until show_hidden_files is set."""
        assert should_skip(".DS_Store", ExplorerFilterConfig()) is True
        assert should_skip(".DS_Store", ExplorerFilterConfig(show_hidden_files=True)) is False

    def test_node_modules(self):
        """Test node_modules follows its own flag."""
        assert should_skip("node_modules", ExplorerFilterConfig()) is True
        assert should_skip("node_modules", ExplorerFilterConfig(show_node_modules=True)) is False

    def test_git_needs_hidden_and_git_flags(self):
        """Test .git is a dot entry and a VCS entry at once."""
        assert should_skip(".git", ExplorerFilterConfig(show_git_files=True)) is True
        assert should_skip(".git", ExplorerFilterConfig(show_hidden_files=True)) is True
        assert should_skip(".git", ExplorerFilterConfig(show_hidden_files=True, show_git_files=True)) is False

    @pytest.mark.parametrize("name", ["dist", "build", ".next", ".nuxt", "coverage", ".nyc_output"])
    def test_build_directories_always_hidden(self, name):
        """Test build output directories are hidden under every setting."""
        config = ExplorerFilterConfig(show_hidden_files=True, show_node_modules=True, show_git_files=True)

        assert should_skip(name, config) is True

    def test_pure(self):
        """Test the verdict depends only on the name and config."""
        config = ExplorerFilterConfig()

        assert [should_skip(".cache", config) for _ in range(3)] == [True, True, True]


class TestBrowsingProjection:
    """Test build_tree(), expand() and filter updates."""

    @pytest.mark.asyncio
    async def test_build_filters_and_sorts(self, project_tree):
        """Test the top level is filtered and sorted directories-first."""
        service = DirectoryTreeService()
        nodes = await service.build_tree(project_tree)

        names = _names(nodes)
        assert names[:2] == ["Assets", "src"]
        assert set(names[2:]) == {".env", "app.js", "b.ts", "README.md"}
        for hidden in (".DS_Store", "node_modules", ".git", "dist"):
            assert hidden not in names

    @pytest.mark.asyncio
    async def test_sort_is_case_insensitive(self):
        """Test names are compared without regard to case."""
        root = MemoryDirectoryHandle.from_mapping(
            "root",
            {"c.md": "", "Zeta": {}, "b.js": "", "alpha": {}, "A.txt": ""},
        )
        nodes = await DirectoryTreeService().build_tree(root)

        assert _names(nodes) == ["alpha", "Zeta", "A.txt", "b.js", "c.md"]

    @pytest.mark.asyncio
    async def test_sort_puts_lowercase_first_on_case_ties(self):
        """Test names differing only in case list the lowercase spelling first."""
        root = MemoryDirectoryHandle.from_mapping("root", {"A.txt": "", "b.txt": "", "a.txt": ""})
        nodes = await DirectoryTreeService().build_tree(root)

        assert _names(nodes) == ["a.txt", "A.txt", "b.txt"]

    @pytest.mark.asyncio
    async def test_node_shape(self, project_tree):
        """Test ids, paths, kinds and lazy children of top-level nodes."""
        nodes = await DirectoryTreeService().build_tree(project_tree)
        src = _node(nodes, "src")
        readme = _node(nodes, "README.md")

        assert src.id == "/src"
        assert src.path == "src"
        assert src.kind is HandleKind.DIRECTORY
        assert src.children == []
        assert src.expanded is False
        assert readme.kind is HandleKind.FILE
        assert readme.children is None

    @pytest.mark.asyncio
    async def test_expand_loads_children_once(self, project_tree):
        """Test expanding fetches children once and collapsing keeps them."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)
        src = _node(service.file_tree, "src")
        calls_before = src.handle.list_calls

        await service.expand(src)
        assert src.expanded is True
        assert _names(src.children) == ["lib", "main.py", "util.js"]
        assert src.handle.list_calls == calls_before + 1

        await service.expand(src)
        assert src.expanded is False
        assert _names(src.children) == ["lib", "main.py", "util.js"]

        await service.expand(src)
        assert src.expanded is True
        assert src.handle.list_calls == calls_before + 1

    @pytest.mark.asyncio
    async def test_nested_paths(self, project_tree):
        """Test child paths extend the parent path."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)
        src = _node(service.file_tree, "src")
        await service.expand(src)
        lib = _node(src.children, "lib")
        await service.expand(lib)

        assert lib.path == "src/lib"
        assert lib.id == "src/lib"
        assert lib.children[0].path == "src/lib/deep.js"

    @pytest.mark.asyncio
    async def test_expand_file_is_noop(self, project_tree):
        """Test expand() leaves file nodes untouched."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)
        readme = _node(service.file_tree, "README.md")

        await service.expand(readme)

        assert readme.expanded is False
        assert readme.children is None

    @pytest.mark.asyncio
    async def test_expand_failure_degrades_to_empty(self, project_tree):
        """Test a failing directory expands to no children without raising."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)
        src = _node(service.file_tree, "src")
        src.handle.fail_listing = True

        await service.expand(src)

        assert src.children == []
        assert src.expanded is True

    @pytest.mark.asyncio
    async def test_update_filter_rebuilds_browsing_only(self, project_tree):
        """Test a filter change rebuilds the browsing tree and keeps the lookup tree."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)
        lookup_before = service.terminal_tree

        config = await service.update_filter(show_hidden_files=True, show_node_modules=True)

        assert config.show_hidden_files is True
        assert config.show_git_files is False
        assert ".DS_Store" in _names(service.file_tree)
        assert "node_modules" in _names(service.file_tree)
        assert ".git" not in _names(service.file_tree)
        assert service.terminal_tree is lookup_before

    @pytest.mark.asyncio
    async def test_update_filter_without_root(self):
        """Test filters can change before a root is selected."""
        service = DirectoryTreeService()
        await service.update_filter(show_git_files=True)

        assert service.config.show_git_files is True
        assert service.file_tree == []


class TestLookupProjection:
    """Test the eager unfiltered lookup tree and its queries."""

    @pytest.mark.asyncio
    async def test_terminal_tree_is_unfiltered(self, project_tree):
        """Test hidden, vendor and build entries appear in the lookup tree."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)

        top = _names(service.terminal_tree.children)
        assert top == [
            "README.md", "src", ".env", "app.js", ".DS_Store",
            "node_modules", ".git", "dist", "Assets", "b.ts",
        ]
        assert service.terminal_tree.name == "project"
        assert service.terminal_tree.is_directory is True

    @pytest.mark.asyncio
    async def test_list_matching_extensions(self, extension_tree):
        """Test extension matching walks the tree in enumeration order."""
        service = DirectoryTreeService()
        await service.set_root(extension_tree)

        assert service.list_matching_extensions([".js"]) == ["a.js", "d.js"]
        assert service.list_matching_extensions([".ts", ".js"]) == ["a.js", "b.ts", "d.js"]

    @pytest.mark.asyncio
    async def test_list_matching_single_extension_string(self, extension_tree):
        """Test a bare extension string is matched as one suffix."""
        service = DirectoryTreeService()
        await service.set_root(extension_tree)

        assert service.list_matching_extensions(".js") == ["a.js", "d.js"]

    @pytest.mark.asyncio
    async def test_directory_symlink_loop_is_not_followed(self, tmp_path):
        """Test a symlink pointing back at its parent is listed as a leaf."""
        (tmp_path / "a.js").write_text("")
        (tmp_path / "loop").symlink_to(tmp_path, target_is_directory=True)
        service = DirectoryTreeService()
        await service.set_root(open_directory(tmp_path))

        assert service.list_matching_extensions([".js"]) == ["a.js"]
        assert [node.name for node in service.list_directory()] == ["a.js", "loop"]

    @pytest.mark.asyncio
    async def test_list_matching_default_extensions(self, project_tree):
        """Test the default script extensions reach into filtered directories."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)

        assert service.list_matching_extensions() == [
            "main.py", "util.js", "deep.js", "app.js", "index.js", "bundle.js",
        ]

    @pytest.mark.asyncio
    async def test_find_by_name(self, project_tree):
        """Test depth-first lookup of files by exact name."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)

        assert service.find_by_name("deep.js").name == "deep.js"
        assert service.find_by_name("HEAD").is_directory is False
        assert service.find_by_name("src") is None
        assert service.find_by_name("missing.txt") is None

    @pytest.mark.asyncio
    async def test_find_by_name_first_match_wins(self):
        """Test the first file in traversal order is returned."""
        root = MemoryDirectoryHandle("root")
        nested = root.add_directory("a").add_file("index.js", "nested")
        root.add_file("index.js", "top")
        service = DirectoryTreeService()
        await service.set_root(root)

        assert service.find_by_name("index.js").handle is nested

    @pytest.mark.asyncio
    async def test_list_directory(self, project_tree):
        """Test path-based listing of the lookup tree."""
        service = DirectoryTreeService()
        await service.set_root(project_tree)

        assert len(service.list_directory()) == 10
        assert _names(service.list_directory("src")) == ["main.py", "util.js", "lib"]
        assert _names(service.list_directory("/src/lib/")) == ["deep.js"]
        assert service.list_directory("missing") == []
        assert service.list_directory("README.md") == []

    @pytest.mark.asyncio
    async def test_failing_subdirectory_is_empty(self):
        """Test a failing subdirectory yields an empty node, siblings survive."""
        root = MemoryDirectoryHandle("root")
        broken = root.add_directory("broken")
        broken.add_file("x.js")
        broken.fail_listing = True
        root.add_file("ok.js")
        service = DirectoryTreeService()
        await service.set_root(root)

        assert service.list_directory("broken") == []
        assert service.list_matching_extensions([".js"]) == ["ok.js"]


class TestLifecycle:
    """Test root selection, reload and reset."""

    @pytest.mark.asyncio
    async def test_no_root_queries_are_empty(self):
        """Test queries before a root is selected return empty results."""
        service = DirectoryTreeService()

        assert service.has_root is False
        assert service.find_by_name("a.js") is None
        assert service.list_matching_extensions() == []
        assert service.list_directory() == []
        assert await service.refresh_file_tree() == []

    @pytest.mark.asyncio
    async def test_set_root_builds_both(self, extension_tree):
        """Test selecting a root builds both projections."""
        service = DirectoryTreeService()
        await service.set_root(extension_tree)

        assert service.has_root is True
        assert service.root is extension_tree
        assert _names(service.file_tree) == ["c", "a.js", "b.ts"]
        assert service.terminal_tree is not None

    @pytest.mark.asyncio
    async def test_load_picks_up_changes(self, extension_tree):
        """Test load() rebuilds from the host."""
        service = DirectoryTreeService()
        await service.set_root(extension_tree)
        extension_tree.add_file("e.js")

        await service.load()

        assert "e.js" in _names(service.file_tree)
        assert service.list_matching_extensions([".js"]) == ["a.js", "d.js", "e.js"]

    @pytest.mark.asyncio
    async def test_reset(self, extension_tree):
        """Test reset() drops the root and both projections."""
        service = DirectoryTreeService(config=ExplorerFilterConfig(show_hidden_files=True))
        await service.set_root(extension_tree)

        service.reset()

        assert service.root is None
        assert service.file_tree == []
        assert service.terminal_tree is None
        assert service.config.show_hidden_files is True
