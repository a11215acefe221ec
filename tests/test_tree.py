from breathe.scan import Entry
from breathe.tree import Tree


def test_add_entry():
    tree = Tree("/root")
    tree.add_entry(Entry(path="/root/a/file.txt", name="file.txt", size=100, is_dir=False))
    tree.add_entry(Entry(path="/root/a", name="a", is_dir=True))
    tree.add_entry(Entry(path="/root/b/c/file2.txt", name="file2.txt", size=200, is_dir=False))
    assert tree.root().size == 300
    assert tree.get("/root/a").size == 100
    assert tree.get("/root/b/c").size == 200
    assert tree.get("/root/b").is_dir is True


def test_children():
    tree = Tree("/root")
    tree.add_entry(Entry(path="/root/a", name="a", is_dir=True))
    tree.add_entry(Entry(path="/root/b", name="b", is_dir=True))
    tree.add_entry(Entry(path="/root/file.txt", name="file.txt", size=50, is_dir=False))
    children = tree.children("/root")
    assert len(children) == 3
    assert children[0].name == "file.txt"


def test_sorted_by_size():
    tree = Tree("/root")
    tree.add_entry(Entry(path="/root/small", name="small", is_dir=True))
    tree.add_entry(Entry(path="/root/small/f.txt", name="f.txt", size=10, is_dir=False))
    tree.add_entry(Entry(path="/root/large", name="large", is_dir=True))
    tree.add_entry(Entry(path="/root/large/f.txt", name="f.txt", size=1000, is_dir=False))
    children = tree.children("/root")
    assert [c.name for c in children] == ["large", "small"]


def test_children_of_unknown_path_is_empty():
    tree = Tree("/root")
    assert tree.children("/nowhere") == []


def test_root_name():
    assert Tree("/root").root().name == "root"
    assert Tree("/").root().name == "/"


def test_file_count():
    tree = Tree("/root")
    tree.add_entry(Entry(path="/root/a/x.txt", name="x.txt", size=1, is_dir=False))
    tree.add_entry(Entry(path="/root/y.txt", name="y.txt", size=2, is_dir=False))
    tree.add_entry(Entry(path="/root/d", name="d", is_dir=True))
    assert tree.file_count() == 2


def test_remove_subtracts_size_and_drops_subtree():
    tree = Tree("/root")
    tree.add_entry(Entry(path="/root/a/x.txt", name="x.txt", size=100, is_dir=False))
    tree.add_entry(Entry(path="/root/b/y.txt", name="y.txt", size=50, is_dir=False))
    tree.remove("/root/a")
    assert tree.root().size == 50
    assert tree.get("/root/a") is None
    assert tree.get("/root/a/x.txt") is None
    assert [c.name for c in tree.children("/root")] == ["b"]
    assert tree.file_count() == 1


def test_remove_unknown_path_leaves_tree_unchanged():
    tree = Tree("/root")
    tree.add_entry(Entry(path="/root/x.txt", name="x.txt", size=7, is_dir=False))
    tree.remove("/root/missing")
    assert tree.root().size == 7
    assert tree.file_count() == 1


def test_add_sets_size_directly():
    tree = Tree("/")
    tree.add("/project1/node_modules", True, 1000)
    tree.add("/project2/node_modules", True, 2000)
    assert tree.get("/project1/node_modules").size == 1000
    assert tree.get("/project1").is_dir is True
    assert tree.root().size == 0
    assert sorted(c.name for c in tree.children("/")) == ["project1", "project2"]


def test_add_existing_node_overwrites_size():
    tree = Tree("/root")
    tree.add("/root/a", True, 10)
    tree.add("/root/a", True, 25)
    assert tree.get("/root/a").size == 25
    assert len(tree.children("/root")) == 1