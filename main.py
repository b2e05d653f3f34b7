from compliance_inspector.main import main

if __name__ == "__main__":
    main()
