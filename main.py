from rich.pretty import pprint

from hinge import *

__prog__ = "vcs"

commit = (
    HingeBuilder()
    .item("message", ("m", "message"), descr="commit message").require()
    .bool("amend", "amend", descr="replace the last commit")
    .arg("path")
)

tool = (
    HingeBuilder()
    .bool("verbose", ("v", "verbose"), descr="print more details")
    .subcommand("commit", "commit", commit, descr="record changes")
    .build(shell=True, fancy=True)
)


if __name__ == '__main__':
    pprint(tool)
    pprint(invoke(tool).unwrap())
