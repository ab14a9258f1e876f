import argparse
import logging
import os
import sys
from .repository import AVC_DIR, init_repository
from .index import add, remove, list_files
from .blob import Blob, store_blob
from .commit import create_commit
from .core import compute_hash, read_file, fetch_all_object_names, fetch_by_hash
from .objects import decode_object, read_object
from .signature import ObjectType
from .tree import build_tree_from_path, format_tree, hash_tree, store_tree
from .exceptions import AvcError


def cmd_init(args):
    try:
        init_repository()
        print(f'Initialized empty avc repository in {os.path.abspath(AVC_DIR)}')
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_hash_object(args):
    try:
        if args.content is not None:
            blob = Blob(args.content.encode())
            digest = store_blob(blob) if args.write else compute_hash(blob.encode())
        elif os.path.isdir(args.file_path):
            tree = build_tree_from_path(args.file_path)
            digest = store_tree(tree) if args.write else hash_tree(tree)
        else:
            blob = Blob(read_file(args.file_path))
            digest = store_blob(blob) if args.write else compute_hash(blob.encode())
        print(digest)
    except FileNotFoundError:
        print(f"Error: File not found: {args.file_path}", file=sys.stderr)
        sys.exit(1)
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_cat_file(args):
    try:
        obj_type, obj = read_object(args.hash_prefix)

        if args.type:
            print(obj_type)
        elif obj_type == ObjectType.BLOB:
            sys.stdout.buffer.write(obj.content)
            sys.stdout.flush()
        elif obj_type == ObjectType.TREE:
            for line in format_tree(obj):
                print(line)
        else:
            print(f'tree {obj.tree_hash}')
            if not obj.is_root():
                print(f'parent {obj.parent_hash}')
            print(f'author {obj.author} <{obj.author_email}>')
            print(f'committer {obj.committer} <{obj.committer_email}>')
            print(f'date {obj.commit_date.isoformat()}')
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_add(args):
    try:
        added = add(args.path)
        print(f"Added {len(added)} file(s) to index")
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_rm(args):
    try:
        remove(args.path)
        print(f"{args.path} removed from index")
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_ls_files(args):
    try:
        for f in list_files(details=args.stage):
            print(f)
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_ls_objects(args):
    try:
        for name in sorted(fetch_all_object_names()):
            print(name)
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_commit_tree(args):
    try:
        tree = fetch_by_hash(args.tree)
        tree_type, _ = decode_object(tree.content)
        if tree_type != ObjectType.TREE:
            print(f"Error: expected tree, got {tree_type}", file=sys.stderr)
            sys.exit(1)

        parent_hash = ''
        if args.parent:
            parent = fetch_by_hash(args.parent)
            parent_type, _ = decode_object(parent.content)
            if parent_type != ObjectType.COMMIT:
                print(f"Error: expected commit parent, got {parent_type}", file=sys.stderr)
                sys.exit(1)
            parent_hash = parent.hash

        print(create_commit(tree.hash, parent_hash=parent_hash))
    except AvcError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='avc',
        description='A content-addressed object store for version control'
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='show debug logging')

    subparsers = parser.add_subparsers(dest='command', metavar='command')
    subparsers.required = True

    parser_init = subparsers.add_parser('init', help='create an empty repository')
    parser_init.set_defaults(func=cmd_init)

    parser_hash = subparsers.add_parser('hash-object',
                                       help='hash and optionally store a file, directory or content')
    source = parser_hash.add_mutually_exclusive_group(required=True)
    source.add_argument('-f', '--file-path', help='file or directory to hash')
    source.add_argument('-c', '--content', help='content to hash')
    parser_hash.add_argument('-w', '--write', action='store_true',
                            help='write object to store')
    parser_hash.set_defaults(func=cmd_hash_object)

    parser_cat = subparsers.add_parser('cat-file', help='display object contents')
    parser_cat.add_argument('-t', '--type', action='store_true',
                           help='show object type only')
    parser_cat.add_argument('hash_prefix', help='hash or prefix')
    parser_cat.set_defaults(func=cmd_cat_file)

    parser_add = subparsers.add_parser('add', help='add a file or directory to the index')
    parser_add.add_argument('path', help='path to add')
    parser_add.set_defaults(func=cmd_add)

    parser_rm = subparsers.add_parser('rm', help='remove a path from the index')
    parser_rm.add_argument('path', help='path to remove')
    parser_rm.set_defaults(func=cmd_rm)

    parser_ls = subparsers.add_parser('ls-files', help='list files in index')
    parser_ls.add_argument('-s', '--stage', action='store_true',
                          help='show entry details')
    parser_ls.set_defaults(func=cmd_ls_files)

    parser_objects = subparsers.add_parser('ls-objects', help='list every stored object')
    parser_objects.set_defaults(func=cmd_ls_objects)

    parser_commit = subparsers.add_parser('commit-tree', help='create a commit for a stored tree')
    parser_commit.add_argument('tree', help='tree hash or prefix')
    parser_commit.add_argument('-p', '--parent', help='parent commit hash or prefix')
    parser_commit.set_defaults(func=cmd_commit_tree)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    args.func(args)


if __name__ == '__main__':
    main()
