from range_rings.viewer import main

main()
