from rich.pretty import pprint

from flagstone import *

app = (
    App("demo", "Flagstone Demo", "1.0", about="Echo the parsed arguments back")
    .untagged_required_arg("file")
    .untagged_optional_arg("target")
    .arg(Arg("Debug").add_short("-d").add_long("--debug").environment("DEMO_DEBUG").help("Verbose output"))
    .arg(Arg("Args").add_long("--args").accepts_value().set_default("").help("Extra arguments"))
    .arg(Arg("Token").add_short("-t").accepts_value().environment("DEMO_TOKEN").set_default("anonymous"))
)


if __name__ == '__main__':
    pprint(app.parse())
