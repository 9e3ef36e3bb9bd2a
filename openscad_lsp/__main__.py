from openscad_lsp.server import main

main()
